"""Tests for feed-based sources: RSS, Atom, TLDR and arXiv."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from hotbrew.shared.errors import SourceFetchError
from hotbrew.sources.arxiv import ArxivSource, format_authors, parse_papers, relevance_score
from hotbrew.sources.base import Priority, SourceConfig
from hotbrew.sources.rss import FeedParseError, RSSSource, normalize_text, parse_feed, parse_feed_date
from hotbrew.sources.tldr import AVAILABLE_FEEDS, TLDRSource

RSS_DOC = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>Blog</title>
  <item>
    <title>First &lt;b&gt;post&lt;/b&gt;</title>
    <link>https://blog.example/1</link>
    <description>&lt;p&gt;Hello   world&lt;/p&gt;</description>
    <guid>post-1</guid>
    <pubDate>Fri, 01 Mar 2024 10:00:00 GMT</pubDate>
  </item>
  <item><title>Second</title><link>https://blog.example/2</link></item>
</channel></rss>"""

ATOM_DOC = """<?xml version="1.0"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <title>Atom entry</title>
    <link rel="self" href="https://blog.example/self"/>
    <link rel="alternate" href="https://blog.example/entry"/>
    <id>tag:entry-1</id>
    <updated>2024-03-01T10:00:00Z</updated>
    <summary>Short summary</summary>
  </entry>
</feed>"""

ARXIV_DOC = """<?xml version="1.0"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/abs/2401.00001v1</id>
    <title>Soil chemistry of Mars</title>
    <summary>Minerals.</summary>
    <published>2024-01-02T00:00:00Z</published>
    <author><name>A</name></author>
    <category term="astro-ph"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2401.00002v1</id>
    <title>LLM agents with tool use and chain-of-thought reasoning</title>
    <summary>We benchmark agentic workflows for RAG retrieval and inference latency.</summary>
    <published>2024-01-01T00:00:00Z</published>
    <link rel="alternate" href="https://arxiv.org/abs/2401.00002v1"/>
    <author><name>A</name></author><author><name>B</name></author>
    <author><name>C</name></author><author><name>D</name></author>
    <category term="cs.CL"/><category term="cs.AI"/>
  </entry>
</feed>"""


class TestParseFeed:
    def test_rss(self):
        entries = parse_feed(RSS_DOC)
        assert len(entries) == 2
        first = entries[0]
        assert first.title == "First post"
        assert first.description == "Hello world"
        assert first.guid == "post-1"
        assert first.published == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert entries[1].published is None

    def test_atom_prefers_alternate_link(self):
        (entry,) = parse_feed(ATOM_DOC)
        assert entry.link == "https://blog.example/entry"
        assert entry.guid == "tag:entry-1"
        assert entry.description == "Short summary"

    def test_invalid_xml(self):
        with pytest.raises(FeedParseError):
            parse_feed("<rss><channel>")

    def test_unsupported_root(self):
        with pytest.raises(FeedParseError):
            parse_feed("<html></html>")

    def test_helpers(self):
        assert normalize_text("<p>a \n  b</p>") == "a b"
        assert parse_feed_date("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
        assert parse_feed_date("") is None


class TestRSSSource:
    @pytest.mark.asyncio
    async def test_fetch_respects_max(self, mock_client):
        client = mock_client(lambda request: httpx.Response(200, text=RSS_DOC))
        section = await RSSSource("Blog", "https://blog.example/rss").fetch(client, SourceConfig(settings={"max": 1}))
        await client.aclose()

        (item,) = section.items
        assert section.icon == "📰"
        assert item.id == "post-1"
        assert item.priority == Priority.LOW
        assert item.actions[0].command == "https://blog.example/1"

    @pytest.mark.asyncio
    async def test_malformed_feed_raises(self, mock_client):
        client = mock_client(lambda request: httpx.Response(200, text="not xml"))
        with pytest.raises(SourceFetchError):
            await RSSSource("Blog", "https://blog.example/rss").fetch(client, SourceConfig())
        await client.aclose()

    def test_age_priorities(self):
        source = RSSSource("Blog", "https://blog.example/rss")
        assert source.priority_for_age(timedelta(minutes=10)) == Priority.HIGH
        assert source.priority_for_age(timedelta(hours=3)) == Priority.MEDIUM
        assert source.priority_for_age(timedelta(days=1)) == Priority.LOW


class TestTLDR:
    def test_for_feed(self):
        source = TLDRSource.for_feed("ai")
        assert source.url == AVAILABLE_FEEDS["ai"].url
        assert source.icon == "🧠"

    def test_priorities_and_metadata(self):
        source = TLDRSource.for_feed("tech")
        assert source.priority_for_age(timedelta(hours=2)) == Priority.HIGH
        assert source.priority_for_age(timedelta(days=2)) == Priority.MEDIUM
        assert source.metadata_for(None) == {"via": "TLDR"}


class TestArxiv:
    def test_relevance(self):
        assert relevance_score("Soil chemistry") == 0
        assert relevance_score("LLM agent reasoning") >= 3

    def test_format_authors(self):
        assert format_authors(["A", "B"]) == "A, B"
        assert format_authors(["A", "B", "C", "D"]) == "A, B, C et al."

    def test_parse_papers(self):
        papers = parse_papers(ARXIV_DOC)
        assert papers[0].url == "http://arxiv.org/abs/2401.00001v1"
        assert papers[1].url == "https://arxiv.org/abs/2401.00002v1"
        assert papers[1].categories == ["cs.CL", "cs.AI"]

    def test_build_url_keeps_raw_or(self):
        url = ArxivSource("Papers", ["cs.CL", "cs.AI"]).build_url(50)
        assert "search_query=cat:cs.CL+OR+cat:cs.AI" in url
        assert url.endswith("max_results=50")

    @pytest.mark.asyncio
    async def test_fetch_ranks_by_relevance(self, mock_client):
        client = mock_client(lambda request: httpx.Response(200, text=ARXIV_DOC))
        section = await ArxivSource("Papers").fetch(client, SourceConfig(settings={"max": 2}))
        await client.aclose()

        assert section.items[0].title.startswith("LLM agents")
        assert section.items[0].priority == Priority.URGENT
        assert section.items[0].metadata["tags"] == ["cs.CL", "cs.AI"]
        assert section.items[1].priority == Priority.MEDIUM
