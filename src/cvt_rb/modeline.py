# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Video modelines built from CVT-RB timings."""

from dataclasses import dataclass

@dataclass
class DVIModeline:
    """
    A CVT-RB timing laid out as an X11 modeline. Each axis is described by
    the position of the first blanked pixel/line (active), the sync pulse
    edges and the total, all counted from the start of active video.
    1920x1080 @ 60Hz under RBv2 gives:

    Modeline "1920x1080R" 133.320 1920 1928 1960 2000 1080 1097 1105 1111 +hsync -vsync

    Reduced blanking always drives HSync positive and VSync negative.
    """

    h_active:      int  # width
    h_sync_start:  int  # start
    h_sync_end:    int  # end
    h_total:       int  # total
    h_sync_invert: bool # True for -HSync, False for +HSync
    v_active:      int  # height
    v_sync_start:  int  # start
    v_sync_end:    int  # end
    v_total:       int  # total
    v_sync_invert: bool # True for -VSync, False for +VSync
    pixel_clk_mhz: float

    @property
    def active_pixels(self):
        return self.h_active * self.v_active

    @property
    def refresh_rate(self):
        return (self.pixel_clk_mhz*1e6)/(self.h_total * self.v_total)

    @property
    def h_freq_khz(self):
        return (self.pixel_clk_mhz*1e3)/self.h_total

    @staticmethod
    def from_timing(timing):
        """
        Modeline for a `CVTTiming`. All reduced blanking timings use
        positive HSync and negative VSync.
        """
        return DVIModeline(
            h_active      = timing.total_active_pixels,
            h_sync_start  = timing.h_sync_start,
            h_sync_end    = timing.h_sync_end,
            h_total       = timing.total_pixels,
            h_sync_invert = False,
            v_active      = timing.v_lines_rnd,
            v_sync_start  = timing.v_sync_start,
            v_sync_end    = timing.v_sync_end,
            v_total       = timing.total_v_lines,
            v_sync_invert = True,
            pixel_clk_mhz = round(timing.act_pixel_freq, 3),
        )

    def default_name(self):
        return f"{self.h_active}x{self.v_active}R"

    def xrandr(self, name=None):
        """Render as an xrandr / X11 `Modeline` line."""
        if name is None:
            name = self.default_name()
        hsync = "-hsync" if self.h_sync_invert else "+hsync"
        vsync = "-vsync" if self.v_sync_invert else "+vsync"
        return (f'Modeline "{name}" {self.pixel_clk_mhz:.3f} '
                f"{self.h_active} {self.h_sync_start} {self.h_sync_end} {self.h_total} "
                f"{self.v_active} {self.v_sync_start} {self.v_sync_end} {self.v_total} "
                f"{hsync} {vsync}")
