from __future__ import annotations

from .xmlquery import parse_xml


def parse_shared_strings(xml: str | bytes | None) -> list[str]:
    root = parse_xml(xml)
    values: list[str] = []
    for si in root.children("si"):
        direct = si.children("t")
        if direct:
            values.append(direct[0].text)
            continue
        # rich text: concatenate runs, phonetic hints (rPh) are not content
        values.append("".join(run.find("t").text for run in si.children("r")))
    return values
