import datetime
import json
import os
import tempfile
import unittest

from bindiff_fixtures import make_bindiff_db

from bindiff_reader.algorithms import BasicBlockAlgorithm, FunctionAlgorithm, OtherAlgorithm
from bindiff_reader.bindiff import BinDiff
from bindiff_reader.models import BasicBlockMatch, ComparisonMetadata, FunctionMatch, InstructionMatch
from bindiff_reader.render import (
    format_basic_block_match,
    format_file,
    format_function_match,
    format_instruction_match,
    format_metadata,
    render_function_matches_json,
    render_function_matches_text,
    render_info_json,
    render_info_text,
)
from bindiff_reader.summary import summarize, summarize_function_matches
from bindiff_reader.utils import dumps, loads


def make_function_match(**kwargs: object) -> FunctionMatch:
    fields: dict[str, object] = dict(
        id=7,
        address1=0x401000,
        name1="main",
        address2=0x402000,
        name2="main",
        similarity=0.123456789,
        confidence=0.987654321,
        flags=3,
        algorithm=FunctionAlgorithm.CALL_REFERENCE_MATCHING,
        evaluate=True,
        comment_supported=False,
        basic_blocks=4,
        edges=5,
        instructions=6,
    )
    fields.update(kwargs)
    return FunctionMatch(**fields)  # type: ignore[arg-type]


class TextRenderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "a_vs_b.BinDiff")
        make_bindiff_db(self.path)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_format_file(self) -> None:
        with BinDiff.open(self.path) as bd:
            text = format_file(bd.read_file_record())
        lines = text.splitlines()
        self.assertEqual(lines[0], "FILE:")
        self.assertIn("  functions:        120", lines)
        self.assertIn("  basic_blocks:     450", lines)
        self.assertIn("  lib_instructions: 100", lines)
        self.assertEqual(len(lines), 14)

    def test_format_metadata(self) -> None:
        with BinDiff.open(self.path) as bd:
            text = format_metadata(bd.read_comparison_metadata())
        lines = text.splitlines()
        self.assertEqual(lines[0], "METADATA:")
        self.assertIn("  created:      2024-03-01 12:30:45", lines)
        self.assertIn("  similarity:   0.88", lines)
        self.assertIn("  confidence:   0.93", lines)

    def test_function_matches_in_row_order(self) -> None:
        with BinDiff.open(self.path) as bd:
            matches = bd.read_function_matches()
        lines = render_function_matches_text(matches).splitlines()
        self.assertEqual(
            lines,
            [
                "main:\tsimilarity: 1.00, confidence: 0.99",
                "sub_1100 -> parse_args\tsimilarity: 0.76, confidence: 0.50, algorithm: MD index matching",
                "helper:\tsimilarity: 0.50, confidence: 0.25",
            ],
        )

    def test_function_match_other_algorithm(self) -> None:
        m = make_function_match(name2="other_main", algorithm=OtherAlgorithm("37"))
        self.assertTrue(format_function_match(m).endswith("algorithm: other(37)"))

    def test_basic_block_and_instruction(self) -> None:
        bb = BasicBlockMatch(
            id=1, function_id=1, address1=-1, address2=0x2010, algorithm=BasicBlockAlgorithm.MANUAL, evaluate=False
        )
        self.assertEqual(format_basic_block_match(bb), "0xffffffffffffffff -> 0x2010 (manual)")
        insn = InstructionMatch(id=1, address1=4096, address2=8192)
        self.assertEqual(format_instruction_match(insn), "4096 -> 8192")

    def test_info_text(self) -> None:
        with BinDiff.open(self.path) as bd:
            text = render_info_text(bd.read_file_records(), bd.read_comparison_metadata(), summarize(bd))
        self.assertIn("FILE:\n", text)
        self.assertIn("METADATA:\n", text)
        self.assertIn("  function_matches:    3\n", text)
        self.assertIn("  basic_block_matches: 3\n", text)
        self.assertIn("    other(37): 1\n", text)


class JsonRenderTests(unittest.TestCase):
    def test_function_match_round_trip(self) -> None:
        for algorithm in (FunctionAlgorithm.CALL_REFERENCE_MATCHING, OtherAlgorithm("37")):
            m = make_function_match(algorithm=algorithm)
            self.assertEqual(loads(dumps(m), FunctionMatch), m)

    def test_function_matches_json(self) -> None:
        m = make_function_match(algorithm=OtherAlgorithm("42"))
        doc = json.loads(render_function_matches_json([m]))
        self.assertEqual(len(doc), 1)
        self.assertEqual(doc[0]["similarity"], 0.123456789)
        self.assertEqual(doc[0]["algorithm"], {"other": "42"})
        self.assertEqual(doc[0]["comment_supported"], False)
        self.assertEqual(loads(render_function_matches_json([m]), list[FunctionMatch]), [m])

    def test_metadata_round_trip(self) -> None:
        metadata = ComparisonMetadata(
            version="BinDiff 8",
            file1=1,
            file2=2,
            description="x",
            created=datetime.datetime(2024, 3, 1, 12, 30, 45, tzinfo=datetime.timezone.utc),
            modified=datetime.datetime(2024, 3, 2, 8, 0, 0, tzinfo=datetime.timezone.utc),
            similarity=0.876543,
            confidence=0.5,
        )
        doc = json.loads(dumps(metadata))
        self.assertEqual(doc["created"], "2024-03-01T12:30:45+00:00")
        self.assertEqual(doc["similarity"], 0.876543)
        self.assertEqual(loads(dumps(metadata), ComparisonMetadata), metadata)

    def test_unknown_algorithm_name(self) -> None:
        doc = json.loads(dumps(make_function_match()))
        doc["algorithm"] = "NO_SUCH_ALGORITHM"
        with self.assertRaises(ValueError):
            loads(json.dumps(doc), FunctionMatch)

    def test_info_json(self) -> None:
        m = make_function_match()
        summary = summarize_function_matches([m], basic_block_matches=2)
        metadata = ComparisonMetadata(
            version="BinDiff 8",
            file1=1,
            file2=2,
            description="",
            created=datetime.datetime(2024, 3, 1, tzinfo=datetime.timezone.utc),
            modified=datetime.datetime(2024, 3, 1, tzinfo=datetime.timezone.utc),
            similarity=0.25,
            confidence=0.75,
        )
        doc = json.loads(render_info_json([], metadata, summary))
        self.assertEqual(doc["files"], [])
        self.assertEqual(doc["metadata"]["version"], "BinDiff 8")
        self.assertEqual(doc["summary"]["function_matches"], 1)
        self.assertEqual(doc["summary"]["basic_block_matches"], 2)
        self.assertEqual(doc["summary"]["algorithms"], {"call references matching": 1})
        self.assertEqual(doc["summary"]["similarity"]["max"], 0.123456789)


class SummaryTests(unittest.TestCase):
    def test_empty(self) -> None:
        summary = summarize_function_matches([])
        self.assertEqual(summary.function_matches, 0)
        self.assertIsNone(summary.similarity)
        self.assertEqual(summary.algorithms, {})

    def test_stats(self) -> None:
        matches = [
            make_function_match(similarity=0.2, algorithm=FunctionAlgorithm.MANUAL),
            make_function_match(similarity=0.4, algorithm=FunctionAlgorithm.NONE),
            make_function_match(similarity=0.9, algorithm=FunctionAlgorithm.MANUAL),
        ]
        summary = summarize_function_matches(matches)
        assert summary.similarity is not None
        self.assertAlmostEqual(summary.similarity.mean, 0.5)
        self.assertAlmostEqual(summary.similarity.median, 0.4)
        self.assertEqual(summary.similarity.min, 0.2)
        self.assertEqual(summary.similarity.max, 0.9)
        self.assertEqual(list(summary.algorithms.items()), [("manual", 2), ("none", 1)])


if __name__ == "__main__":
    unittest.main()
