# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Exceptions raised for bad CVT-RB inputs. All of them are `ValueError`s."""


class CVTError(ValueError):
    pass


class InvalidParameter(CVTError):
    """A parameter value violates its constraint."""

    def __init__(self, field, value, rule):
        self.field = field
        self.value = value
        self.rule = rule
        super().__init__(f"Invalid {field}: {value!r}: {rule}")


class MissingParameter(InvalidParameter):
    """A required parameter was never set and has no default for the version."""

    def __init__(self, field, version):
        self.version = version
        super().__init__(field, None, f"required for {version} but not set")

    def __str__(self):
        return f"Missing {self.field}: {self.rule}"


class InvalidVersion(CVTError):

    def __init__(self, token):
        self.token = token
        super().__init__(f"Invalid CVT-RB version: {token!r} (expected 'v2' or 'v3')")
