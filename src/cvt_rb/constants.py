# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

"""
Fixed constants of the CVT Reduced Blanking timing formulas (VESA CVT 2.0).

Field names here match the same-named fields of `CVTTiming`,
which are filled from this table when the calculation does not derive them.
"""

from dataclasses import dataclass, fields
from types import MappingProxyType

from .types import RBVersion


@dataclass(frozen=True)
class CVTConstants:
    clock_step:           float # Pixel clock precision (MHz)
    cell_gran_rnd:        int   # Character cell width (pixels)
    h_front_porch:        int   # Horizontal front porch (pixels)
    rb_h_blank:           int   # Minimum HBlank (pixels)
    rb_h_sync:            int   # HSync width (pixels)
    rb_min_v_blank:       float # Minimum VBlank period (usec)
    rb_v_fporch:          int   # Minimum vertical front porch (lines)
    v_sync_rnd:           int   # VSync width (lines)
    min_v_bporch:         int   # Minimum vertical back porch (lines)
    v_field_rate_ppm_adj: float # Offset added to the requested refresh rate (ppm)

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


CONSTANTS = MappingProxyType({
    RBVersion.V2: CVTConstants(
        clock_step           = 0.001,
        cell_gran_rnd        = 1,
        h_front_porch        = 8,
        rb_h_blank           = 80,
        rb_h_sync            = 32,
        rb_min_v_blank       = 460,
        rb_v_fporch          = 1,
        v_sync_rnd           = 8,
        min_v_bporch         = 6,
        v_field_rate_ppm_adj = 0,
    ),
    RBVersion.V3: CVTConstants(
        clock_step           = 0.001,
        cell_gran_rnd        = 8,
        h_front_porch        = 8,
        rb_h_blank           = 80,
        rb_h_sync            = 32,
        rb_min_v_blank       = 460,
        rb_v_fporch          = 1,
        v_sync_rnd           = 8,
        min_v_bporch         = 6,
        v_field_rate_ppm_adj = 350,
    ),
})
