"""Shared fixtures: a builder for small MediaWiki XML dumps."""

from __future__ import annotations

import io
import logging
from typing import Any, Dict, List
from xml.sax.saxutils import escape

import pytest

from wikiq.app.revision_processor import WikiqProcessor
from wikiq.domain.models import WikiqConfig

EXPORT_NS = "http://www.mediawiki.org/xml/export-0.10/"


def _revision_xml(rev: Dict[str, Any]) -> str:
    parts = ["    <revision>", f"      <id>{rev['id']}</id>"]
    if "parentid" in rev:
        parts.append(f"      <parentid>{rev['parentid']}</parentid>")
    parts.append(f"      <timestamp>{rev.get('timestamp', '2003-11-07T00:43:23Z')}</timestamp>")
    parts.append("      <contributor>")
    if "ip" in rev:
        parts.append(f"        <ip>{escape(rev['ip'])}</ip>")
    else:
        parts.append(f"        <username>{escape(rev.get('username', 'Alice'))}</username>")
        parts.append(f"        <id>{rev.get('user_id', 42)}</id>")
    parts.append("      </contributor>")
    if rev.get("minor"):
        parts.append("      <minor />")
    if "comment" in rev:
        parts.append(f"      <comment>{escape(rev['comment'])}</comment>")
    parts.append("      <model>wikitext</model>")
    parts.append("      <format>text/x-wiki</format>")
    parts.append(f'      <text xml:space="preserve">{escape(rev.get("text", ""))}</text>')
    parts.append("      <sha1>ignored</sha1>")
    parts.append("    </revision>")
    return "\n".join(parts)


def build_dump(pages: List[Dict[str, Any]]) -> bytes:
    out = [
        f'<mediawiki xmlns="{EXPORT_NS}" version="0.10" xml:lang="en">',
        "  <siteinfo>",
        "    <sitename>Wikipedia</sitename>",
        "    <base>https://en.wikipedia.org/wiki/Main_Page</base>",
        "    <namespaces>",
        '      <namespace key="0" case="first-letter" />',
        '      <namespace key="1" case="first-letter">Talk</namespace>',
        "    </namespaces>",
        "  </siteinfo>",
    ]
    for page in pages:
        out.append("  <page>")
        out.append(f"    <title>{escape(page['title'])}</title>")
        out.append(f"    <ns>{page.get('ns', 0)}</ns>")
        out.append(f"    <id>{page['id']}</id>")
        for rev in page.get("revisions", []):
            out.append(_revision_xml(rev))
        out.append("  </page>")
    out.append("</mediawiki>")
    return ("\n".join(out) + "\n").encode("utf-8")


@pytest.fixture
def make_dump():
    return build_dump


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("wikiq-tests")


@pytest.fixture
def run_dump(logger):
    """Process a dump in memory; returns (header, rows as lists of fields, processor)."""

    def _run(data: bytes, **config_kwargs):
        config = WikiqConfig(**config_kwargs)
        out = io.StringIO()
        processor = WikiqProcessor.from_config(config, out, logger)
        processor.writer.write_header()
        processor.process(io.BytesIO(data))
        lines = out.getvalue().split("\n")
        assert lines[-1] == ""
        header = lines[0].split("\t")
        rows = [line.split("\t") for line in lines[1:-1]]
        return header, rows, processor

    return _run
