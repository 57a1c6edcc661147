# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

"""
Validated input parameters for the CVT-RB timing calculation.

Each field checks its own constraint on assignment and raises
`InvalidParameter` before anything is stored, so a failed assignment
leaves the previous value in place. Fields that were never assigned read
back as `UNSPECIFIED`; version-specific defaults are only applied when
the calculation resolves the set for a particular version. Rules that
depend on the version (e.g. no additional HBlank for v2) are checked by
the calculation, not here.
"""

import enum
import math
import sys

from .constants import CONSTANTS
from .errors import InvalidParameter, MissingParameter
from .types import RBVersion


class _Unspecified(enum.Enum):
    UNSPECIFIED = "unspecified"

    def __repr__(self):
        return "UNSPECIFIED"

    def __bool__(self):
        return False

UNSPECIFIED = _Unspecified.UNSPECIFIED

# Smallest VBlank any supported version allows (usec).
MIN_VBLANK_US = min(c.rb_min_v_blank for c in CONSTANTS.values())

# Legal non-zero values of `additional_hblank` (v3 only).
ADDITIONAL_HBLANK_STEPS = tuple(range(8, 121, 8))


def _is_int(v):
    return isinstance(v, int) and not isinstance(v, bool)

def _is_real(v):
    return (isinstance(v, (int, float)) and not isinstance(v, bool)
            and math.isfinite(v))

def _check_version(v):
    if not _is_int(v) or v not in [r.number for r in RBVersion.all()]:
        return "must be 2 or 3"

def _check_positive_int(v):
    if not _is_int(v):
        return "not an integer"
    if v <= 0:
        return "must be greater than 0"
    if v > sys.float_info.max:
        return "too large to use as a real number"

def _check_positive_real(v):
    if not _is_real(v):
        return "not a finite real number"
    if v <= 0:
        return "must be greater than 0.0"

def _check_bool(v):
    if not isinstance(v, bool):
        return "not a boolean"

def _check_additional_hblank(v):
    if not _is_int(v):
        return "not an integer"
    if v != 0 and v not in ADDITIONAL_HBLANK_STEPS:
        return "must be 0 or a multiple of 8 between 8 and 120"

def _check_vblank(v):
    if not _is_real(v):
        return "not a finite real number"
    if v < MIN_VBLANK_US:
        return f"must be at least {MIN_VBLANK_US} usec"


class Parameter:
    """
    Descriptor for a single validated field of `CVTParameters`.

    `check` returns `None` for an acceptable value, or a short description
    of the violated rule. `defaults` maps `RBVersion` to the value used
    when the field is unset.
    """

    def __init__(self, check, defaults=None, doc=None):
        self.check = check
        self.defaults = dict(defaults or {})
        self.__doc__ = doc

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj._values.get(self.name, UNSPECIFIED)

    def __set__(self, obj, value):
        rule = self.check(value)
        if rule is not None:
            raise InvalidParameter(self.name, value, rule)
        obj._values[self.name] = value

    def __delete__(self, obj):
        obj._values.pop(self.name, None)

    def default(self, version):
        return self.defaults.get(RBVersion.parse(version), UNSPECIFIED)


class CVTParameters:
    """Inputs of a CVT-RB calculation. Keyword arguments set fields by name."""

    rb_version = Parameter(_check_version,
        defaults={RBVersion.V2: 2, RBVersion.V3: 3},
        doc="Version of the reduced blanking formula (2 or 3).")

    h_pixels = Parameter(_check_positive_int,
        doc="Desired active horizontal pixels per line. Rounded down to a "
            "whole number of character cells.")

    v_lines = Parameter(_check_positive_int,
        doc="Desired active vertical lines per frame.")

    refresh_hz = Parameter(_check_positive_real,
        doc="Target vertical refresh rate (Hz).")

    video_opt = Parameter(_check_bool,
        defaults={RBVersion.V2: False, RBVersion.V3: False},
        doc="Apply a 1000/1001 factor to the refresh rate (v2 only).")

    additional_hblank = Parameter(_check_additional_hblank,
        defaults={RBVersion.V2: 0, RBVersion.V3: 0},
        doc="Pixels added to the base HBlank. v2: 0. v3: 0 or a multiple "
            "of 8 between 8 and 120.")

    vblank_us = Parameter(_check_vblank,
        defaults={RBVersion.V2: 460, RBVersion.V3: 460},
        doc="Desired VBlank time (usec), 460 or greater.")

    early_vsync = Parameter(_check_bool,
        defaults={RBVersion.V2: False, RBVersion.V3: False},
        doc="Place VSync near the middle of VBlank instead of the end (v3 only).")

    def __init__(self, **kwargs):
        self._values = {}
        for name, value in kwargs.items():
            if name not in self.names():
                raise TypeError(f"Unknown CVT parameter: {name!r}")
            setattr(self, name, value)

    @classmethod
    def names(cls):
        return [name for name, attr in vars(cls).items()
                if isinstance(attr, Parameter)]

    @classmethod
    def defaults(cls, version):
        """New parameter set holding every default `version` defines."""
        params = cls()
        for name in cls.names():
            value = vars(cls)[name].default(version)
            if value is not UNSPECIFIED:
                setattr(params, name, value)
        return params

    def is_set(self, name):
        return name in self._values

    def as_dict(self):
        return {name: getattr(self, name) for name in self.names()}

    def copy(self):
        params = type(self)()
        params._values = dict(self._values)
        return params

    def resolve(self, version):
        """
        Values for every field as seen by `version`: explicitly set values,
        else the version default. Raises `MissingParameter` for a field
        that has neither.
        """
        version = RBVersion.parse(version)
        resolved = {}
        for name in self.names():
            value = getattr(self, name)
            if value is UNSPECIFIED:
                value = vars(type(self))[name].default(version)
            if value is UNSPECIFIED:
                raise MissingParameter(name, version.value)
            resolved[name] = value
        return resolved

    def __eq__(self, other):
        if not isinstance(other, CVTParameters):
            return NotImplemented
        return self._values == other._values

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"{type(self).__name__}({fields})"
