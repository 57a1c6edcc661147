# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

import dataclasses
import sys
import unittest

from parameterized import parameterized

from cvt_rb import (CONSTANTS, CVTParameters, InvalidParameter,
                    InvalidVersion, MissingParameter, RBVersion, compute)


def mode(h_pixels, v_lines, refresh_hz, **kwargs):
    return CVTParameters(h_pixels=h_pixels, v_lines=v_lines,
                         refresh_hz=refresh_hz, **kwargs)


class CVTCalcTests(unittest.TestCase):

    def test_1080p60_v2(self):
        t = compute("v2", mode(1920, 1080, 60, rb_version=2, video_opt=False,
                               additional_hblank=0, vblank_us=460,
                               early_vsync=False))
        self.assertEqual(t.v_field_rate_rqd, 60)
        self.assertEqual(t.total_active_pixels, 1920)
        self.assertEqual(t.v_lines_rnd, 1080)
        self.assertEqual(t.act_v_blank_time, 460)
        self.assertEqual(t.vbi_lines, 31)
        self.assertEqual(t.rb_min_vbi, 15)
        self.assertEqual(t.v_blank, 31)
        self.assertEqual(t.total_v_lines, 1111)
        self.assertEqual(t.v_back_porch, 6)
        self.assertEqual(t.v_front_porch, 17)
        self.assertEqual(t.total_pixels, 2000)
        self.assertEqual(t.h_back_porch, 40)
        self.assertEqual(t.refresh_multiplier, 1)
        self.assertAlmostEqual(t.act_pixel_freq, 133.320, delta=0.01)
        self.assertAlmostEqual(t.act_h_freq, 66.660, places=3)
        self.assertAlmostEqual(t.act_frame_rate, 60.0, places=3)

    def test_1080p60_v3(self):
        params = mode(1920, 1080, 60)
        v2 = compute("v2", params)
        v3 = compute("v3", params)
        self.assertAlmostEqual(v3.v_field_rate_rqd, 60.021)
        self.assertEqual(v3.total_v_lines, 1111)
        self.assertEqual(v3.total_pixels, 2000)
        # 133.36666 MHz rounded up to the next 1 kHz step.
        self.assertAlmostEqual(v3.act_pixel_freq, 133.367, places=6)
        self.assertGreaterEqual(v3.act_pixel_freq, v2.act_pixel_freq)

    # Published VESA CVT-RBv2 timings.
    @parameterized.expand([
        ["4096x2160p60",    4096, 2160, 60, False, 4176, 2222, 556.744, 48],
        ["4096x2160p59_94", 4096, 2160, 60, True,  4176, 2222, 556.188, 48],
    ])
    def test_published_v2(self, name, h, v, hz, video_opt, h_total, v_total, pclk, v_fp):
        t = compute(RBVersion.V2, mode(h, v, hz, video_opt=video_opt))
        self.assertEqual(t.total_pixels, h_total)
        self.assertEqual(t.total_v_lines, v_total)
        self.assertEqual(t.v_front_porch, v_fp)
        self.assertEqual(t.h_sync_start, 4104)
        self.assertEqual(t.v_sync_start, 2208)
        self.assertAlmostEqual(t.act_pixel_freq, pclk, places=6)

    @parameterized.expand([
        [h] for h in [1, 7, 8, 9, 640, 1366, 1919, 1920, 2561, 3839]
    ])
    def test_cell_granularity(self, h):
        v2 = compute("v2", mode(h, 480, 60))
        v3 = compute("v3", mode(h, 480, 60))
        self.assertEqual(v2.total_active_pixels, h)
        self.assertEqual(v3.total_active_pixels % 8, 0)
        self.assertLessEqual(v3.total_active_pixels, h)
        self.assertGreater(v3.total_active_pixels, h - 8)

    @parameterized.expand([
        ["v2", 640, 480, 60],
        ["v2", 1920, 1080, 59.94],
        ["v2", 3840, 2160, 120],
        ["v3", 1366, 768, 75],
        ["v3", 2560, 1440, 144],
        ["v3", 7680, 4320, 30],
    ])
    def test_clock_step_multiple(self, version, h, v, hz):
        t = compute(version, mode(h, v, hz))
        steps = t.act_pixel_freq / 0.001
        self.assertGreaterEqual(t.act_pixel_freq, 0)
        self.assertAlmostEqual(steps, round(steps), places=6)

    @parameterized.expand([
        [1920, 1080, 60],
        [1280, 720, 30],
        [3840, 2160, 24],
    ])
    def test_video_opt_v2(self, h, v, hz):
        normal = compute("v2", mode(h, v, hz))
        video = compute("v2", mode(h, v, hz, video_opt=True))
        self.assertAlmostEqual(video.refresh_multiplier, 1000 / 1001)
        self.assertLessEqual(video.act_pixel_freq, normal.act_pixel_freq)

    def test_video_opt_ignored_v3(self):
        normal = compute("v3", mode(1920, 1080, 60))
        video = compute("v3", mode(1920, 1080, 60, video_opt=True))
        self.assertEqual(video.refresh_multiplier, 1)
        self.assertEqual(video, normal)

    def test_additional_hblank_v3(self):
        t = compute("v3", mode(1366, 768, 60, additional_hblank=8))
        self.assertEqual(t.total_active_pixels, 1360)
        self.assertEqual(t.total_pixels, 1360 + 80 + 8)
        self.assertEqual(t.h_back_porch, 48)
        self.assertEqual(t.h_blank, 88)

    def test_additional_hblank_v2_rejected(self):
        with self.assertRaises(InvalidParameter) as cm:
            compute("v2", mode(1920, 1080, 60, additional_hblank=8))
        self.assertEqual(cm.exception.field, "additional_hblank")

    def test_early_vsync_v3(self):
        t = compute("v3", mode(1920, 1080, 60, early_vsync=True))
        self.assertEqual(t.vbi_lines, 31)
        self.assertEqual(t.v_back_porch, 15)
        self.assertEqual(t.v_front_porch, 8)

    def test_early_vsync_ignored_v2(self):
        t = compute("v2", mode(1920, 1080, 60, early_vsync=True))
        self.assertEqual(t.v_back_porch, 6)

    def test_early_vsync_uses_unclamped_vbi(self):
        t = compute("v3", mode(640, 100, 60, early_vsync=True))
        self.assertEqual(t.vbi_lines, 3)
        self.assertEqual(t.v_blank, 15)
        self.assertEqual(t.v_back_porch, 1)
        self.assertEqual(t.v_front_porch, 6)

    def test_degenerate_front_porch(self):
        t = compute("v3", mode(640, 500, 60, early_vsync=True))
        self.assertEqual(t.vbi_lines, 15)
        self.assertEqual(t.v_back_porch, 7)
        self.assertEqual(t.v_front_porch, 0)

    def test_longer_vblank(self):
        t = compute("v2", mode(1920, 1080, 60, vblank_us=600))
        self.assertEqual(t.act_v_blank_time, 600)
        self.assertEqual(t.vbi_lines, 40)
        self.assertEqual(t.total_v_lines, 1120)

    # Frames too short for the minimum VBlank, VBlanks as long as the frame,
    # and clocks beyond float range are rejected as bad parameters.
    @parameterized.expand([
        ["refresh_at_min_vblank", "v2", dict(refresh_hz=1e6 / 460),            "refresh_hz"],
        ["refresh_3khz",          "v2", dict(refresh_hz=3000),                 "refresh_hz"],
        ["refresh_huge",          "v2", dict(refresh_hz=1e306),                "refresh_hz"],
        ["refresh_float_max",     "v3", dict(refresh_hz=sys.float_info.max),   "refresh_hz"],
        ["vblank_huge",           "v2", dict(vblank_us=1e308),                 "vblank_us"],
        ["vblank_whole_frame",    "v2", dict(vblank_us=16666.7),               "vblank_us"],
        ["width_clock_overflow",  "v2", dict(h_pixels=10**305),                "h_pixels"],
    ])
    def test_unrealizable_mode(self, name, version, overrides, field):
        kwargs = dict(h_pixels=1920, v_lines=1080, refresh_hz=60)
        kwargs.update(overrides)
        with self.assertRaises(InvalidParameter) as cm:
            compute(version, CVTParameters(**kwargs))
        self.assertEqual(cm.exception.field, field)

    def test_short_frame_still_computes(self):
        t = compute("v2", mode(1920, 1080, 2000))
        self.assertGreaterEqual(t.v_blank, 12420)
        self.assertEqual(t.total_v_lines, t.v_blank + 1080)
        self.assertGreater(t.act_pixel_freq, 0)

    def test_constant_fallback(self):
        for version in RBVersion.all():
            t = compute(version, mode(1920, 1080, 60))
            c = CONSTANTS[version]
            self.assertEqual(t.h_front_porch, c.h_front_porch)
            self.assertEqual(t.rb_h_sync, c.rb_h_sync)
            self.assertEqual(t.v_sync_rnd, c.v_sync_rnd)
            self.assertEqual(t.h_sync_end - t.h_sync_start, 32)
            self.assertEqual(t.v_sync_end - t.v_sync_start, 8)

    @parameterized.expand([
        ["v4"], ["V1"], [""], [4], [True], [2.0],
    ])
    def test_invalid_version(self, version):
        with self.assertRaises(InvalidVersion):
            compute(version, mode(1920, 1080, 60))

    @parameterized.expand([
        ["v3"], ["V3"], [3], [RBVersion.V3],
    ])
    def test_version_tokens(self, version):
        t = compute(version, mode(1920, 1080, 60))
        self.assertAlmostEqual(t.act_pixel_freq, 133.367, places=6)

    def test_version_from_params(self):
        self.assertAlmostEqual(
            compute(None, mode(1920, 1080, 60, rb_version=3)).act_pixel_freq, 133.367, places=6)
        self.assertAlmostEqual(
            compute(None, mode(1920, 1080, 60)).act_pixel_freq, 133.320, delta=0.01)

    def test_explicit_version_wins(self):
        t = compute("v3", mode(1920, 1080, 60, rb_version=2))
        self.assertAlmostEqual(t.act_pixel_freq, 133.367, places=6)

    @parameterized.expand([
        ["h_pixels"], ["v_lines"], ["refresh_hz"],
    ])
    def test_missing(self, name):
        params = mode(1920, 1080, 60)
        delattr(params, name)
        with self.assertRaises(MissingParameter) as cm:
            compute("v2", params)
        self.assertEqual(cm.exception.field, name)

    def test_params_untouched(self):
        params = mode(1920, 1080, 60)
        before = params.copy()
        compute("v3", params)
        self.assertEqual(params, before)

    def test_result_immutable(self):
        t = compute("v2", mode(1920, 1080, 60))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            t.act_pixel_freq = 0
        with self.assertRaises(TypeError):
            CONSTANTS[RBVersion.V2] = None

    def test_independent_results(self):
        a = compute("v2", mode(1920, 1080, 60))
        b = compute("v2", mode(1920, 1080, 60))
        self.assertIsNot(a, b)
        self.assertEqual(a, b)

    def test_prettyprint(self):
        text = compute("v2", mode(1920, 1080, 60)).prettyprint()
        self.assertIn("1920x1080", text)
        self.assertIn("133.320 MHz", text)
        self.assertIn("│ horizontal │   1920 │      8 │     32 │     40 │   2000 │", text)
        self.assertIn("│ vertical   │   1080 │     17 │      8 │      6 │   1111 │", text)
