from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from chanplot.cli import main


CONFIG = """
geometry = "{geometry}"

[window]
width = 320
height = 240

[titles]
top = "Synthetic run"

[[channels]]
name = "temp"
display_low = -10.0
display_high = 10.0

[[channels]]
name = "valve"
kind = "enum"
states = ["shut", "open"]
"""


class CliTests(unittest.TestCase):
    def _write_config(self, tmp: str, geometry: str = "time_y") -> Path:
        path = Path(tmp) / "plot.toml"
        path.write_text(CONFIG.format(geometry=geometry), encoding="utf-8")
        return path

    def test_render_png_in_one_batch(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "plot.png"
            code = main(["render", str(self._write_config(tmp)), "--out", str(out), "--samples", "40"])
            self.assertEqual(code, 0)
            self.assertTrue(out.read_bytes().startswith(b"\x89PNG"))

    def test_render_pdf_streaming_incrementally(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "plot.pdf"
            config = self._write_config(tmp, "time_yy")
            code = main(["render", str(config), "--out", str(out), "--samples", "30", "--batch", "7"])
            self.assertEqual(code, 0)
            self.assertTrue(out.read_bytes().startswith(b"%PDF"))

    def test_render_reports_bad_input(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertLogs("chanplot.cli", level="ERROR"):
                self.assertEqual(main(["render", str(Path(tmp) / "missing.toml")]), 2)
            config = self._write_config(tmp, "polar")
            with self.assertLogs("chanplot.cli", level="ERROR"):
                self.assertEqual(main(["render", str(config)]), 2)
            config = self._write_config(tmp)
            with self.assertLogs("chanplot.cli", level="ERROR"):
                self.assertEqual(main(["render", str(config), "--samples", "0"]), 2)


if __name__ == "__main__":
    unittest.main()
