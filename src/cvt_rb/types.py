# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

import enum

from .errors import InvalidVersion


class RBVersion(str, enum.Enum):
    V2 = "v2"
    V3 = "v3"

    def default():
        return RBVersion.V2

    def all():
        return [
            RBVersion.V2,
            RBVersion.V3,
        ]

    @property
    def number(self):
        return {
            RBVersion.V2: 2,
            RBVersion.V3: 3,
        }[self]

    @staticmethod
    def parse(token):
        """
        Accepts an `RBVersion`, 'v2' / 'v3' (any case) or the integers 2 / 3.
        Anything else raises `InvalidVersion`.
        """
        if isinstance(token, RBVersion):
            return token
        if isinstance(token, str):
            for version in RBVersion.all():
                if token.strip().lower() == version.value:
                    return version
        elif isinstance(token, int) and not isinstance(token, bool):
            for version in RBVersion.all():
                if token == version.number:
                    return version
        raise InvalidVersion(token)
