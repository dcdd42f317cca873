"""Recent arXiv papers ranked by LLM-practitioner relevance."""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import httpx

from hotbrew.shared.errors import SourceFetchError
from hotbrew.shared.utils import parse_rfc3339, truncate
from hotbrew.sources.base import Action, Priority, Section, Source, SourceConfig, SourceItem

API_URL = "https://export.arxiv.org/api/query"
ATOM_NS = "{http://www.w3.org/2005/Atom}"
ARXIV_USER_AGENT = "hotbrew/1.0 (terminal-rss)"

DEFAULT_CATEGORIES: list[str] = ["cs.CL", "cs.AI", "cs.LG", "cs.MA"]

RELEVANCE_PATTERNS: list[str] = [
    # core LLM terms
    r"\bllm\b", r"\blarge language model", r"\bfoundation model",
    r"\btransformer\b", r"\battention\b", r"\bpre.?train",
    # agents
    r"\bagent\b", r"\bagentic\b", r"\bmulti.?agent\b",
    r"\btool\s*(use|call|ing)\b", r"\bfunction call",
    r"\bplanning\b", r"\borchestrat", r"\bworkflow\b",
    # reasoning
    r"\breason(ing)?\b", r"chain.of.thought", r"\bcot\b",
    r"\bthink(ing)?\b", r"\bself.?reflect", r"\bverif",
    # retrieval
    r"\brag\b", r"\bretrieval", r"\bvector", r"\bembedding",
    r"\bknowledge.?(graph|base)\b", r"\bsemantic.?search",
    # prompting and alignment
    r"\bprompt", r"\binstruct", r"\bfine.?tun", r"\balign",
    r"\brlhf\b", r"\bdpo\b", r"\breinforcement",
    r"\bin.?context.?learn", r"\bfew.?shot", r"\bzero.?shot",
    # model names
    r"\bgpt\b", r"\bclaude\b", r"\bllama\b", r"\bgemini\b",
    r"\bmistral\b", r"\bqwen\b", r"\bdeepseek\b",
    r"\banthropic\b", r"\bopen.?ai\b",
    # practical building
    r"\binference\b", r"\bserving\b", r"\blatency\b",
    r"\bquantiz", r"\bdistill", r"\bprun",
    r"\bcontext.?window\b", r"\blong.?context",
    r"\bscaling\b", r"\befficien",
    r"\bbenchmark", r"\bevaluat",
    # code
    r"\bcode.?gen", r"\bcoding\b", r"\bprogram.?synth",
    r"\bsoftware.?eng", r"\bdebug",
    # safety
    r"\bhallucin", r"\bground(ing|ed)\b", r"\bfaithful",
    r"\bsafety\b", r"\bjailbreak\b", r"\bred.?team",
    # memory and context
    r"\bmemory\b", r"\bchat\b", r"\bconversat",
    r"\bsummariz", r"\bcompress",
    # multimodal
    r"\bmultimodal\b", r"\bvision.?language\b", r"\bvlm\b",
    # deployment
    r"\bapi\b", r"\bdeployment\b", r"\bproduction\b",
    r"\bcost\b", r"\boptimiz", r"\bcach",
    r"\btokeniz", r"\btoken\b",
]

RELEVANCE_RE = re.compile("|".join(RELEVANCE_PATTERNS), re.IGNORECASE)


def relevance_score(text: str) -> int:
    """Number of relevance keyword hits in *text*."""
    return sum(1 for _ in RELEVANCE_RE.finditer(text))


@dataclass
class Paper:
    id: str
    title: str
    summary: str
    published: datetime | None
    url: str
    authors: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)


def parse_papers(content: str | bytes) -> list[Paper]:
    """Parse an arXiv Atom response into :class:`Paper` records."""
    root = ET.fromstring(content)
    papers: list[Paper] = []
    for entry in root.findall(f"{ATOM_NS}entry"):
        paper_id = (entry.findtext(f"{ATOM_NS}id") or "").strip()
        url = paper_id
        for link in entry.findall(f"{ATOM_NS}link"):
            if link.get("rel") == "alternate":
                url = link.get("href", url)
                break
        published = parse_rfc3339(entry.findtext(f"{ATOM_NS}published")) or parse_rfc3339(
            entry.findtext(f"{ATOM_NS}updated")
        )
        papers.append(
            Paper(
                id=paper_id,
                title=(entry.findtext(f"{ATOM_NS}title") or "").strip(),
                summary=entry.findtext(f"{ATOM_NS}summary") or "",
                published=published,
                url=url,
                authors=[
                    name.strip()
                    for name in (a.findtext(f"{ATOM_NS}name") or "" for a in entry.findall(f"{ATOM_NS}author"))
                    if name.strip()
                ],
                categories=[c.get("term", "") for c in entry.findall(f"{ATOM_NS}category")],
            )
        )
    return papers


def format_authors(authors: list[str]) -> str:
    if len(authors) > 3:
        return ", ".join(authors[:3]) + " et al."
    return ", ".join(authors)


class ArxivSource(Source):
    """Newest papers in a set of categories, most relevant first."""

    ttl = timedelta(hours=1)

    def __init__(self, name: str, categories: list[str] | None = None, icon: str = "") -> None:
        self.name = name
        self.categories = list(categories or DEFAULT_CATEGORIES)
        self.icon = icon or "📄"

    def build_url(self, fetch_count: int) -> str:
        # arXiv expects the raw "+OR+" query, not a percent-encoded one
        query = "+OR+".join(f"cat:{cat}" for cat in self.categories)
        return (
            f"{API_URL}?search_query={query}&sortBy=submittedDate"
            f"&sortOrder=descending&max_results={fetch_count}"
        )

    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        max_items = config.get_int("max", 5)
        fetch_count = max(50, max_items * 10)

        response = await self._get(
            client, self.build_url(fetch_count), headers={"User-Agent": ARXIV_USER_AGENT}
        )
        try:
            papers = parse_papers(response.content)
        except ET.ParseError as exc:
            raise SourceFetchError(self.name, f"parse: {exc}") from exc

        scored = [(relevance_score(f"{p.title} {p.summary}"), p) for p in papers]
        # stable sort keeps submission order among equal scores
        scored.sort(key=lambda pair: pair[0], reverse=True)

        items = [self._to_item(paper, score) for score, paper in scored[:max_items]]
        return Section(name=self.name, icon=self.icon, priority=30, items=items)

    def _to_item(self, paper: Paper, score: int) -> SourceItem:
        if score >= 8:
            priority = Priority.URGENT
        elif score >= 4:
            priority = Priority.HIGH
        else:
            priority = Priority.MEDIUM

        abstract = truncate(paper.summary.strip().replace("\n", " "), 250)
        return SourceItem(
            id=paper.id,
            title=paper.title,
            subtitle=abstract,
            body=f"Authors: {format_authors(paper.authors)}\n\n{paper.summary}",
            url=paper.url,
            priority=priority,
            timestamp=paper.published,
            category="research",
            icon=self.icon,
            actions=[Action(key="o", label="open", command=paper.url)],
            metadata={
                "authors": paper.authors,
                "tags": paper.categories,
                "relevance_score": score,
            },
        )
