from __future__ import annotations

import logging
import re
from pathlib import Path

from .dataset import ProjectRecord
from .errors import MalformedDataset
from .properties import Taxonomy

logger = logging.getLogger(__name__)

ATX_HEADING_RE = re.compile(r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<text>.*?))?(?:[ \t]+#+)?[ \t]*$")
SETEXT_UNDERLINE_RE = re.compile(r"^ {0,3}(?P<marks>=+|-+)[ \t]*$")
FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})")
COMMENT_RE = re.compile(r"<!--(?P<body>.*?)-->", re.DOTALL)
SLUG_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)

COMPLETED = "completed"


def heading_slug(text: str) -> str:
    return SLUG_STRIP_RE.sub("", text.strip().lower()).replace(" ", "-")


def parse_metadata(body: str) -> dict[str, str]:
    separator = "\n" if "\n" in body else ","
    metadata: dict[str, str] = {}
    for entry in body.split(separator):
        if not entry.strip():
            continue
        parts = entry.split(":")
        if len(parts) != 2:
            raise MalformedDataset(f"invalid metadata entry: {entry.strip()!r}")
        metadata[parts[0].strip()] = parts[1].strip()
    return metadata


class _ReferenceExtractor:
    def __init__(self, taxonomy: Taxonomy) -> None:
        self.taxonomy = taxonomy
        self.headings: list[str] = []
        self.references: dict[str, list[ProjectRecord]] = {}

    def push_heading(self, level: int, text: str) -> None:
        while len(self.headings) >= level:
            self.headings.pop()
        self.headings.append(text.strip())

    def add_comment(self, body: str) -> None:
        metadata = parse_metadata(body)
        ref_id = metadata.get("id")
        if not ref_id:
            raise MalformedDataset(f"project reference without id: {body.strip()!r}")

        status = metadata.get("status")
        timeline = metadata.get("timeline")
        if status == COMPLETED and timeline is None:
            timeline = COMPLETED
        self._validate(ref_id, status, timeline)

        title = list(self.headings)
        if "label" in metadata:
            title.append(metadata["label"])
        if not title:
            raise MalformedDataset(f"id={ref_id} msg=reference has no heading or label")

        record: ProjectRecord = {"title": title, "status": status}  # type: ignore[typeddict-item]
        if timeline is not None:
            record["timeline"] = timeline
        if "color" in metadata:
            record["color"] = metadata["color"]
        if self.headings:
            record["headingId"] = heading_slug(self.headings[-1])
        self.references.setdefault(ref_id, []).append(record)

    def _validate(self, ref_id: str, status: str | None, timeline: str | None) -> None:
        if status is None:
            raise MalformedDataset(f'id={ref_id} msg=missing "status" property')
        if status not in self.taxonomy.statuses:
            raise MalformedDataset(f"id={ref_id} msg=unknown property value={status}")
        if timeline is not None and timeline not in self.taxonomy.timelines:
            raise MalformedDataset(f"id={ref_id} msg=unknown property value={timeline}")

    def run(self, text: str) -> dict[str, list[ProjectRecord]]:
        lines = text.splitlines()
        fence: str | None = None
        paragraph: str | None = None
        i = 0
        while i < len(lines):
            line = lines[i]
            i += 1
            if fence is not None:
                if line.strip().startswith(fence):
                    fence = None
                continue
            fence_match = FENCE_RE.match(line)
            if fence_match:
                fence = fence_match.group("fence")
                paragraph = None
                continue
            heading = ATX_HEADING_RE.match(line)
            if heading:
                self.push_heading(len(heading.group("marks")), heading.group("text") or "")
                paragraph = None
                continue
            underline = SETEXT_UNDERLINE_RE.match(line)
            if underline and paragraph is not None:
                self.push_heading(1 if underline.group("marks")[0] == "=" else 2, paragraph)
                paragraph = None
                continue
            if "<!--" in line:
                chunk = line[line.index("<!--") :]
                while "-->" not in chunk and i < len(lines):
                    chunk += "\n" + lines[i]
                    i += 1
                for match in COMMENT_RE.finditer(chunk):
                    self.add_comment(match.group("body"))
                paragraph = None
                continue
            paragraph = line.strip() or None
        return self.references


def extract_references(text: str, taxonomy: Taxonomy) -> dict[str, list[ProjectRecord]]:
    """Collect project references from Markdown annotated with metadata comments.

    Each ``<!-- id: ..., status: ... -->`` comment becomes a reference titled
    by the enclosing heading path, grouped by its ``id``.
    """
    references = _ReferenceExtractor(taxonomy).run(text)
    logger.debug("extracted references for %d ids", len(references))
    return references


def extract_references_from_path(path: Path, taxonomy: Taxonomy) -> dict[str, list[ProjectRecord]]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDataset(f"markdown is not utf-8: {exc.reason} at byte {exc.start}") from exc
    return extract_references(text, taxonomy)
