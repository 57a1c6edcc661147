# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

"""
CVT Reduced Blanking (v2 and v3) timing calculation.

`compute()` follows the numbered steps of the VESA CVT 2.0 RB timing
formula. Each step consumes the results of earlier ones, so the order
below is fixed.
"""

import logging
import math
import sys
import textwrap
from dataclasses import dataclass, fields

from .constants import CONSTANTS
from .errors import InvalidParameter
from .types import RBVersion


def _check(ok, field, value, rule):
    if not ok:
        raise InvalidParameter(field, value, rule)


@dataclass(frozen=True)
class CVTTiming:
    """Result of a CVT-RB calculation. Field names match `CVTConstants` where shared."""

    v_field_rate_rqd:    float # Refresh rate including ppm adjustment (Hz)
    total_active_pixels: int   # Active pixels per line
    v_lines_rnd:         int   # Active lines per frame
    h_period_est:        float # Estimated line period (usec)
    act_v_blank_time:    float # VBlank time actually used (usec)
    vbi_lines:           int   # Lines needed for the VBlank time, before clamping
    rb_min_vbi:          int   # Smallest legal VBlank (lines)
    v_blank:             int   # VBlank (lines)
    total_v_lines:       int   # Lines per frame
    v_back_porch:        int   # Vertical back porch (lines)
    v_front_porch:       int   # Vertical front porch (lines), may be <= 0
    total_pixels:        int   # Pixels per line
    h_back_porch:        int   # Horizontal back porch (pixels)
    refresh_multiplier:  float # 1000/1001 for video-optimized v2, else 1
    act_pixel_freq:      float # Pixel clock (MHz)
    act_h_freq:          float # Line rate (kHz)
    act_frame_rate:      float # Frame rate (Hz)
    h_front_porch:       int   # Horizontal front porch (pixels)
    rb_h_sync:           int   # HSync width (pixels)
    v_sync_rnd:          int   # VSync width (lines)

    @property
    def h_blank(self):
        return self.total_pixels - self.total_active_pixels

    @property
    def h_sync_start(self):
        return self.total_active_pixels + self.h_front_porch

    @property
    def h_sync_end(self):
        return self.h_sync_start + self.rb_h_sync

    @property
    def v_sync_start(self):
        return self.v_lines_rnd + self.v_front_porch

    @property
    def v_sync_end(self):
        return self.v_sync_start + self.v_sync_rnd

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}

    template = """
    {h}x{v} @ {rate:.3f} Hz, pixel clock {clk:.3f} MHz, line rate {hfreq:.3f} kHz
    ┌────────────┬────────┬────────┬────────┬────────┬────────┐
    │            │ active │ front  │ sync   │ back   │ total  │
    ├────────────┼────────┼────────┼────────┼────────┼────────┤
    │ horizontal │ {h:>6} │ {hfp:>6} │ {hs:>6} │ {hbp:>6} │ {ht:>6} │
    │ vertical   │ {v:>6} │ {vfp:>6} │ {vs:>6} │ {vbp:>6} │ {vt:>6} │
    └────────────┴────────┴────────┴────────┴────────┴────────┘
    vblank {vblank} lines ({vbt:.1f} usec)"""

    def prettyprint(self):
        return textwrap.dedent(self.template[1:]).format(
            h=self.total_active_pixels,
            v=self.v_lines_rnd,
            rate=self.act_frame_rate,
            clk=self.act_pixel_freq,
            hfp=self.h_front_porch,
            hs=self.rb_h_sync,
            hbp=self.h_back_porch,
            ht=self.total_pixels,
            vfp=self.v_front_porch,
            vs=self.v_sync_rnd,
            vbp=self.v_back_porch,
            vt=self.total_v_lines,
            hfreq=self.act_h_freq,
            vblank=self.v_blank,
            vbt=self.act_v_blank_time,
            )


def compute(version, params):
    """
    Calculate CVT-RB timings for `params` using formula `version`
    ('v2', 'v3', 2, 3 or an `RBVersion`).

    If `version` is `None`, `params.rb_version` selects the formula (or
    the default version if that is unset). An explicit `version` always
    takes precedence over `params.rb_version`.

    Raises `InvalidVersion` for an unsupported version, `MissingParameter`
    if a field without a default was never set, and `InvalidParameter` if
    `additional_hblank` is non-zero for v2 or the mode cannot be realized
    (frame period not longer than the minimum VBlank, VBlank not shorter
    than the frame, or a pixel clock out of float range).
    """

    if version is None:
        version = params.rb_version or RBVersion.default()
    version = RBVersion.parse(version)
    c = CONSTANTS[version]
    p = params.resolve(version)

    if p["rb_version"] != version.number:
        logging.debug(f"rb_version={p['rb_version']} overridden by requested {version.value}")

    is_v2 = version == RBVersion.V2
    is_v3 = version == RBVersion.V3

    if is_v2 and p["additional_hblank"] != 0:
        raise InvalidParameter("additional_hblank", p["additional_hblank"], "must be 0 for v2")

    # The frame period (usec) must fit the minimum VBlank plus some active time,
    # and the requested VBlank must be shorter than the whole frame.
    frame_us = 1_000_000 / (p["refresh_hz"] * (1 + c.v_field_rate_ppm_adj / 1_000_000))
    _check(frame_us > c.rb_min_v_blank, "refresh_hz", p["refresh_hz"],
           "leaves no active time after the minimum VBlank")
    _check(p["vblank_us"] < frame_us, "vblank_us", p["vblank_us"],
           "not shorter than the frame period")

    t = {}

    # 1. Required field rate (Hz).
    t["v_field_rate_rqd"] = p["refresh_hz"] * (1 + c.v_field_rate_ppm_adj / 1_000_000)

    # 2. Round active pixels down to a character cell boundary.
    t["total_active_pixels"] = (math.floor(p["h_pixels"] / c.cell_gran_rnd) *
                                c.cell_gran_rnd)

    # 3. Round active lines down to an integer.
    t["v_lines_rnd"] = math.floor(p["v_lines"])

    # 4. Estimated horizontal period (usec).
    t["h_period_est"] = (((1_000_000 / t["v_field_rate_rqd"]) - c.rb_min_v_blank) /
                         t["v_lines_rnd"])
    _check(t["h_period_est"] > 0, "v_lines", p["v_lines"],
           "too many lines for the frame period")

    # 5. VBlank time, no shorter than the minimum.
    if p["vblank_us"] < c.rb_min_v_blank:
        t["act_v_blank_time"] = c.rb_min_v_blank
    else:
        t["act_v_blank_time"] = p["vblank_us"]

    # 6. Idealized VBlank lines.
    vbi = t["act_v_blank_time"] / t["h_period_est"]
    _check(math.isfinite(vbi), "v_lines", p["v_lines"],
           "too many lines for the frame period")
    t["vbi_lines"] = math.ceil(vbi)

    # 7. Actual VBlank lines, no fewer than front porch + sync + back porch minimums.
    t["rb_min_vbi"] = c.rb_v_fporch + c.v_sync_rnd + c.min_v_bporch
    t["v_blank"] = max(t["vbi_lines"], t["rb_min_vbi"])

    # 8. Total lines.
    t["total_v_lines"] = t["v_blank"] + t["v_lines_rnd"]
    _check(t["total_v_lines"] <= sys.float_info.max, "v_lines", p["v_lines"],
           "too many lines for the frame period")

    # 9. Vertical back porch. Early VSync splits the unclamped VBI line count.
    if is_v3 and p["early_vsync"]:
        t["v_back_porch"] = math.floor(t["vbi_lines"] / 2)
    else:
        t["v_back_porch"] = c.min_v_bporch

    # 10. Vertical front porch (not clamped).
    t["v_front_porch"] = t["v_blank"] - t["v_back_porch"] - c.v_sync_rnd

    # 11. Total pixels per line.
    additional_hblank = p["additional_hblank"] if is_v3 else 0
    t["total_pixels"] = t["total_active_pixels"] + c.rb_h_blank + additional_hblank

    # 12. Horizontal back porch.
    t["h_back_porch"] = c.rb_h_blank + additional_hblank - c.h_front_porch - c.rb_h_sync

    # 13. Pixel clock (MHz) to a whole number of clock steps: v2 rounds down, v3 up.
    if is_v2 and p["video_opt"]:
        t["refresh_multiplier"] = 1000 / 1001
    else:
        t["refresh_multiplier"] = 1
    steps = (t["v_field_rate_rqd"] * t["total_v_lines"] * t["total_pixels"] /
             1_000_000 * t["refresh_multiplier"]) / c.clock_step
    _check(math.isfinite(steps), "h_pixels", p["h_pixels"],
           "pixel clock for this mode is not a finite number")
    if is_v2:
        t["act_pixel_freq"] = c.clock_step * math.floor(steps)
    else:
        t["act_pixel_freq"] = c.clock_step * math.ceil(steps)

    # 14. Actual horizontal frequency (kHz).
    t["act_h_freq"] = 1000 * t["act_pixel_freq"] / t["total_pixels"]

    # 15. Actual frame rate (Hz).
    t["act_frame_rate"] = 1000 * t["act_h_freq"] / t["total_v_lines"]

    # 16. Anything not derived above is a constant of the same name.
    constants = c.as_dict()
    for f in fields(CVTTiming):
        if f.name not in t:
            t[f.name] = constants[f.name]

    timing = CVTTiming(**t)

    logging.debug(
        f"CVT-RB{version.number} {p['h_pixels']}x{p['v_lines']}@{p['refresh_hz']}Hz: "
        f"{timing.total_pixels}x{timing.total_v_lines} total, "
        f"{timing.act_pixel_freq:.3f} MHz, {timing.act_frame_rate:.3f} Hz")

    return timing
