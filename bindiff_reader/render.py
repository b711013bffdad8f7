from collections.abc import Sequence
from typing import Any, Optional

from .models import BasicBlockMatch, ComparisonMetadata, FileRecord, FunctionMatch, InstructionMatch
from .summary import MatchSummary, ScoreStats
from .utils import dumps

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def hex_address(addr: int) -> str:
    # addresses are stored as signed 64-bit integers
    return f"{addr & 0xFFFFFFFFFFFFFFFF:#x}"


def format_file(file: FileRecord) -> str:
    return f"""\
FILE:
  id:               {file.id}
  filename:         {file.filename}
  exe_filename:     {file.exe_filename}
  hash:             {file.hash}
  functions:        {file.functions}
  lib_functions:    {file.lib_functions}
  calls:            {file.calls}
  basic_blocks:     {file.basic_blocks}
  lib_basic_blocks: {file.lib_basic_blocks}
  edges:            {file.edges}
  lib_edges:        {file.lib_edges}
  instructions:     {file.instructions}
  lib_instructions: {file.lib_instructions}
"""


def format_metadata(metadata: ComparisonMetadata) -> str:
    return f"""\
METADATA:
  version:      {metadata.version}
  file1:        {metadata.file1}
  file2:        {metadata.file2}
  description:  {metadata.description}
  created:      {metadata.created.strftime(TIMESTAMP_FORMAT)}
  modified:     {metadata.modified.strftime(TIMESTAMP_FORMAT)}
  similarity:   {metadata.similarity:.2f}
  confidence:   {metadata.confidence:.2f}
"""


def format_function_match(m: FunctionMatch) -> str:
    if m.name1 != m.name2:
        return (
            f"{m.name1} -> {m.name2}\tsimilarity: {m.similarity:.2f}, confidence: {m.confidence:.2f}, "
            f"algorithm: {m.algorithm}"
        )
    return f"{m.name1}:\tsimilarity: {m.similarity:.2f}, confidence: {m.confidence:.2f}"


def format_basic_block_match(m: BasicBlockMatch) -> str:
    return f"{hex_address(m.address1)} -> {hex_address(m.address2)} ({m.algorithm})"


def format_instruction_match(m: InstructionMatch) -> str:
    return f"{m.address1} -> {m.address2}"


def format_summary(summary: MatchSummary) -> str:
    def _stats(stats: Optional[ScoreStats]) -> str:
        if stats is None:
            return "-"
        return f"mean {stats.mean:.2f}, median {stats.median:.2f}, min {stats.min:.2f}, max {stats.max:.2f}"

    lines = [
        "SUMMARY:",
        f"  function_matches:    {summary.function_matches}",
        f"  basic_block_matches: {summary.basic_block_matches}",
        f"  instruction_matches: {summary.instruction_matches}",
        f"  similarity:          {_stats(summary.similarity)}",
        f"  confidence:          {_stats(summary.confidence)}",
    ]
    if summary.algorithms:
        lines.append("  algorithms:")
        for label, count in summary.algorithms.items():
            lines.append(f"    {label}: {count}")
    return "\n".join(lines) + "\n"


# --------------------------------------


def render_info_text(files: Sequence[FileRecord], metadata: ComparisonMetadata, summary: MatchSummary) -> str:
    blocks = [format_file(f) for f in files]
    blocks.append(format_metadata(metadata))
    blocks.append(format_summary(summary))
    return "\n".join(blocks)


def render_info_json(files: Sequence[FileRecord], metadata: ComparisonMetadata, summary: MatchSummary) -> str:
    doc: dict[str, Any] = {"files": list(files), "metadata": metadata, "summary": summary}
    return dumps(doc)


def render_function_matches_text(matches: Sequence[FunctionMatch]) -> str:
    return "\n".join(format_function_match(m) for m in matches)


def render_function_matches_json(matches: Sequence[FunctionMatch]) -> str:
    return dumps(list(matches))
