import contextlib
import io
import os
import sys
import tempfile
import unittest
from pathlib import Path
from typing import Any

from bindiff_reader.binexport import UNKNOWN_EXECUTABLE_NAME, BinExport
from bindiff_reader.binexport2 import BinExport2
from bindiff_reader.errors import DecodeError, PathNotFoundError

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))
import binexport_info  # noqa: E402


def make_binexport() -> Any:
    message = BinExport2()
    message.meta_information.executable_name = "kernel.release.t6020"
    message.meta_information.executable_id = "0123abcd"
    message.meta_information.architecture_name = "arm64"
    message.section.add(address=0x1000, size=0x200, flag_r=True, flag_x=True)
    message.library.add(name="libc.so.6", load_address=0x7F0000)
    message.call_graph.vertex.add(address=0x1000, mangled_name="_Z4mainv", demangled_name="main()")
    message.call_graph.vertex.add(address=0x1100, mangled_name="helper")
    message.call_graph.vertex.add(address=0x2000, type=2)
    message.call_graph.edge.add(source_vertex_index=0, target_vertex_index=1)
    message.call_graph.edge.add(source_vertex_index=1, target_vertex_index=2)
    return message


class BinExportDecodeTests(unittest.TestCase):
    def test_executable_name(self) -> None:
        binexport = BinExport.decode(make_binexport().SerializeToString())
        self.assertEqual(binexport.executable_name(), "kernel.release.t6020")
        self.assertEqual(binexport.executable_id(), "0123abcd")
        self.assertEqual(binexport.architecture_name(), "arm64")

    def test_meta_without_name(self) -> None:
        message = BinExport2()
        message.meta_information.SetInParent()
        binexport = BinExport.decode(message.SerializeToString())
        self.assertEqual(binexport.executable_name(), UNKNOWN_EXECUTABLE_NAME)
        self.assertEqual(binexport.executable_name(), "unknown executable")
        self.assertIsNone(binexport.architecture_name())

    def test_no_meta(self) -> None:
        binexport = BinExport.decode(b"")
        with self.assertRaises(DecodeError):
            binexport.executable_name()

    def test_truncated(self) -> None:
        data = make_binexport().SerializeToString()
        with self.assertRaises(DecodeError):
            BinExport.decode(data[:-3])

    def test_sections_and_libraries(self) -> None:
        binexport = BinExport.decode(make_binexport().SerializeToString())
        (section,) = binexport.sections
        self.assertEqual((section.address, section.size), (0x1000, 0x200))
        self.assertEqual((section.flag_r, section.flag_w, section.flag_x), (True, False, True))
        (library,) = binexport.libraries
        self.assertEqual(library.name, "libc.so.6")
        self.assertEqual(library.load_address, 0x7F0000)
        self.assertFalse(library.is_static)

    def test_call_graph(self) -> None:
        binexport = BinExport.decode(make_binexport().SerializeToString())
        g = binexport.call_graph
        self.assertIs(binexport.call_graph, g)
        self.assertEqual(sorted(g.nodes), [0x1000, 0x1100, 0x2000])
        self.assertEqual(sorted(g.edges), [(0x1000, 0x1100), (0x1100, 0x2000)])
        self.assertEqual(g.nodes[0x1000]["name"], "main()")
        self.assertEqual(g.nodes[0x1100]["name"], "helper")
        self.assertIsNone(g.nodes[0x2000]["name"])
        self.assertEqual(g.nodes[0x1000]["type"], "NORMAL")
        self.assertEqual(g.nodes[0x2000]["type"], "IMPORTED")

    def test_call_graph_bad_edge(self) -> None:
        message = make_binexport()
        message.call_graph.edge.add(source_vertex_index=0, target_vertex_index=9)
        binexport = BinExport.decode(message.SerializeToString())
        with self.assertRaises(DecodeError):
            binexport.call_graph

    def test_no_call_graph(self) -> None:
        binexport = BinExport.decode(b"")
        self.assertEqual(binexport.call_graph.number_of_nodes(), 0)

    def test_invalid_utf8_name(self) -> None:
        # meta_information { executable_name: b"\xff\xfe" }
        data = b"\x0a\x04\x0a\x02\xff\xfe"
        with self.assertRaises(DecodeError):
            BinExport.decode(data).executable_name()

    def test_repeated_scalars_are_packed(self) -> None:
        message = BinExport2()
        message.instruction.add(address=1, operand_index=[1, 2])
        data = message.SerializeToString()
        self.assertIn(b"\x22\x02\x01\x02", data)
        decoded = BinExport.decode(data)
        self.assertEqual(list(decoded.message.instruction[0].operand_index), [1, 2])


class BinExportOpenTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "kernel.BinExport")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_open(self) -> None:
        with open(self.path, "wb") as f:
            f.write(make_binexport().SerializeToString())
        binexport = BinExport.open(self.path)
        self.assertEqual(binexport.executable_name(), "kernel.release.t6020")
        self.assertEqual(
            binexport_info.describe(binexport, verbose=True).splitlines(),
            [
                "executable_name: kernel.release.t6020",
                "architecture:    arm64",
                "sections:        1",
                "call graph:      3 vertices, 2 edges",
            ],
        )

    def test_open_missing(self) -> None:
        with self.assertRaises(PathNotFoundError):
            BinExport.open(self.path)

    def test_open_directory(self) -> None:
        with self.assertRaises(PathNotFoundError):
            BinExport.open(self.temp_dir.name)

    def run_script(self, *argv: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        code = 0
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            try:
                binexport_info.main(list(argv))
            except SystemExit as e:
                code = e.code if isinstance(e.code, int) else 1
        return code, stdout.getvalue(), stderr.getvalue()

    def test_script_prints_name(self) -> None:
        with open(self.path, "wb") as f:
            f.write(make_binexport().SerializeToString())
        code, out, err = self.run_script(self.path)
        self.assertEqual(code, 0)
        self.assertEqual(out, "executable_name: kernel.release.t6020\n")
        self.assertEqual(err, "")

    def test_script_missing_path(self) -> None:
        code, out, err = self.run_script(self.path)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertTrue(err.startswith("error: "))
        self.assertEqual(len(err.strip().splitlines()), 1)

    def test_script_no_meta(self) -> None:
        with open(self.path, "wb"):
            pass
        code, out, err = self.run_script(self.path)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertEqual(err, "error: no meta information available\n")


if __name__ == "__main__":
    unittest.main()
