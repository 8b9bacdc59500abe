"""Source map v3 helpers.

`mappings` is decoded into absolute segments per generated line so the
post-processing steps can re-indent lines and insert new ones without
breaking the relative VLQ encoding, then encoded back.
"""

from __future__ import annotations

import json
from typing import List, Optional

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_B64_INDEX = {c: i for i, c in enumerate(_B64)}

# [generated column, source index, source line, source column, name index]
Segment = List[int]


def decode_vlq(segment: str) -> list[int]:
    values: list[int] = []
    value = shift = 0
    for ch in segment:
        try:
            digit = _B64_INDEX[ch]
        except KeyError:
            raise ValueError(f"Invalid base64 VLQ character {ch!r}") from None
        value += (digit & 31) << shift
        if digit & 32:
            shift += 5
            continue
        negative = value & 1
        value >>= 1
        values.append(-value if negative else value)
        value = shift = 0
    if shift:
        raise ValueError(f"Truncated VLQ segment {segment!r}")
    return values


def encode_vlq(values: list[int]) -> str:
    out = []
    for v in values:
        vlq = ((-v) << 1) | 1 if v < 0 else v << 1
        while True:
            digit = vlq & 31
            vlq >>= 5
            if vlq:
                digit |= 32
            out.append(_B64[digit])
            if not vlq:
                break
    return "".join(out)


def decode_mappings(mappings: str) -> list[list[Segment]]:
    lines: list[list[Segment]] = []
    src = src_line = src_col = name = 0
    for group in mappings.split(";"):
        col = 0
        line: list[Segment] = []
        for raw in group.split(","):
            if not raw:
                continue
            fields = decode_vlq(raw)
            col += fields[0]
            seg = [col]
            if len(fields) >= 4:
                src += fields[1]
                src_line += fields[2]
                src_col += fields[3]
                seg += [src, src_line, src_col]
                if len(fields) >= 5:
                    name += fields[4]
                    seg.append(name)
            line.append(seg)
        lines.append(line)
    return lines


def encode_mappings(lines: list[list[Segment]]) -> str:
    prev_src = prev_line = prev_col = prev_name = 0
    groups = []
    for line in lines:
        prev_gen = 0
        parts = []
        for seg in sorted(line, key=lambda s: s[0]):
            fields = [seg[0] - prev_gen]
            prev_gen = seg[0]
            if len(seg) >= 4:
                fields += [seg[1] - prev_src, seg[2] - prev_line, seg[3] - prev_col]
                prev_src, prev_line, prev_col = seg[1], seg[2], seg[3]
                if len(seg) >= 5:
                    fields.append(seg[4] - prev_name)
                    prev_name = seg[4]
            parts.append(encode_vlq(fields))
        groups.append(",".join(parts))
    return ";".join(groups)


class SourceMap:
    def __init__(self, data: dict):
        self.data = data
        self.lines = decode_mappings(data.get("mappings", ""))

    @classmethod
    def from_json(cls, text: str) -> "SourceMap":
        return cls(json.loads(text))

    def _line(self, index: int) -> list[Segment]:
        while len(self.lines) <= index:
            self.lines.append([])
        return self.lines[index]

    def shift_columns(self, index: int, from_col: int, delta: int) -> None:
        """Move every segment of generated line `index` at or after `from_col`."""
        if not delta:
            return
        for seg in self._line(index):
            if seg[0] >= from_col:
                seg[0] += delta

    def insert_line(
        self,
        index: int,
        copy_from: Optional[int] = None,
        from_col: int = 0,
        delta: int = 0,
    ) -> None:
        """Insert a generated line before `index`, optionally mapped like `copy_from`."""
        new: list[Segment] = []
        if copy_from is not None:
            for seg in self._line(copy_from):
                seg = list(seg)
                if seg[0] >= from_col:
                    seg[0] += delta
                new.append(seg)
        if index > len(self.lines):
            self._line(index - 1)
        self.lines.insert(index, new)

    def to_dict(self) -> dict:
        data = dict(self.data)
        data["mappings"] = encode_mappings(self.lines)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
