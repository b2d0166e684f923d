"""
Pattern Extractor Agent - Local heuristic resume parsing

Fallback tier used when the remote parsing service is unavailable.
Everything here is a pure function of the input text: no network, no
clock, no randomness. The same text always yields the same RawDraft.
"""
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from config import settings
from schemas.profile_schemas import DraftSource, NameField, RawDraft
from utils.logger import logger


# ==================== Contact / Link Patterns ====================

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}")
# International +CC 5-5 numbers, or an optional +CC followed by (AAA) 123-4567 style groups.
# Candidates are still validated by digit count.
PHONE_RE = re.compile(
    r"(?<![\w+])"
    r"(?:\+\d{1,3}[-. \t]?\d{4,5}[-. \t]?\d{5,6}"
    r"|(?:\+\d{1,3}[-. \t]?)?(?:\(\d{3}\)|\d{3})[-. \t]?\d{3}[-. \t]?\d{4})"
    r"(?!\w)"
)
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15

URL_RE = re.compile(r"https?://[^\s<>\"'\])]+", re.IGNORECASE)
LINKEDIN_BARE_RE = re.compile(r"(?:www\.)?linkedin\.com/in/[\w-]+", re.IGNORECASE)
GITHUB_BARE_RE = re.compile(r"(?:www\.)?github\.com/[\w-]+", re.IGNORECASE)
URL_TRAILING_PUNCT = ".,;:!?"

BLOG_DOMAINS = ("medium.com", "dev.to", "hashnode", "substack.com", "wordpress.com", "blogspot.com")
BLOG_PATH_RE = re.compile(r"/(?:blog|posts?)(?:/|$)", re.IGNORECASE)

LINK_CHANNELS = ("linkedin", "github", "twitter", "blog", "whatsapp", "telegram")


def _host(url: str) -> str:
    if "://" not in url:
        url = "//" + url
    return (urlparse(url).hostname or "").lower()


def _host_is(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def classify_url(url: str) -> Optional[str]:
    """
    Classify a URL into one of LINK_CHANNELS

    Returns:
        Channel name, or None for a generic website
    """
    host = _host(url)
    if not host:
        return None
    if "linkedin.com" in host:
        return "linkedin"
    if "github.com" in host:
        return "github"
    if _host_is(host, "twitter.com") or _host_is(host, "x.com"):
        return "twitter"
    if _host_is(host, "wa.me"):
        return "whatsapp"
    if _host_is(host, "t.me"):
        return "telegram"
    if any(domain in host for domain in BLOG_DOMAINS):
        return "blog"
    path = urlparse(url if "://" in url else "//" + url).path
    if BLOG_PATH_RE.search(path):
        return "blog"
    return None


# ==================== Skills Vocabulary ====================

# (keyword, display form); output follows this order, not document order
SKILL_VOCABULARY: Tuple[Tuple[str, str], ...] = (
    ("javascript", "JavaScript"),
    ("typescript", "TypeScript"),
    ("python", "Python"),
    ("java", "Java"),
    ("c++", "C++"),
    ("c#", "C#"),
    ("golang", "Go"),
    ("rust", "Rust"),
    ("ruby", "Ruby"),
    ("php", "PHP"),
    ("swift", "Swift"),
    ("kotlin", "Kotlin"),
    ("scala", "Scala"),
    ("html", "HTML"),
    ("css", "CSS"),
    ("sass", "Sass"),
    ("react", "React"),
    ("angular", "Angular"),
    ("vue", "Vue"),
    ("node", "Node.js"),
    ("express", "Express"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("fastapi", "FastAPI"),
    ("spring", "Spring"),
    ("asp.net", "ASP.NET"),
    ("laravel", "Laravel"),
    ("graphql", "GraphQL"),
    ("rest api", "REST API"),
    ("sql", "SQL"),
    ("nosql", "NoSQL"),
    ("mysql", "MySQL"),
    ("postgresql", "PostgreSQL"),
    ("mongodb", "MongoDB"),
    ("redis", "Redis"),
    ("docker", "Docker"),
    ("kubernetes", "Kubernetes"),
    ("aws", "AWS"),
    ("azure", "Azure"),
    ("gcp", "GCP"),
    ("linux", "Linux"),
    ("git", "Git"),
    ("jenkins", "Jenkins"),
    ("ci/cd", "CI/CD"),
    ("webpack", "Webpack"),
    ("jira", "Jira"),
    ("agile", "Agile"),
    ("scrum", "Scrum"),
    ("tensorflow", "TensorFlow"),
    ("pytorch", "PyTorch"),
    ("machine learning", "Machine Learning"),
    ("deep learning", "Deep Learning"),
    ("data science", "Data Science"),
    ("analytics", "Analytics"),
)

# Word-boundary match that also works for keywords ending in symbols (c++, c#)
_SKILL_PATTERNS = tuple(
    (re.compile(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)", re.IGNORECASE), display)
    for keyword, display in SKILL_VOCABULARY
)


# ==================== Sections ====================

SECTION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "summary": ("summary", "objective", "about me"),
    "education": ("education", "academic"),
    "experience": ("experience", "work history", "employment"),
    "projects": ("projects", "portfolio"),
    "certifications": ("certifications", "certificates", "licenses"),
    "awards": ("awards", "achievements", "honors"),
}

# Every keyword that can open a section, including sections we do not parse
HEADER_KEYWORDS: Tuple[str, ...] = (
    "summary", "objective", "about me",
    "experience", "work history", "employment",
    "education", "academic",
    "skills",
    "projects", "portfolio",
    "certifications", "certificates", "licenses",
    "awards", "achievements", "honors",
    "publications", "languages", "interests", "hobbies", "references",
)

HEADER_MAX_CHARS = 30
TITLE_MAX_CHARS = 60
DESCRIPTION_MIN_CHARS = 20

TECH_LABEL_RE = re.compile(r"^(?:technologies|tech stack|tech|skills|tools)\b\s*[:\-]?\s*", re.IGNORECASE)
BULLET_RE = re.compile(r"^[•●▪‣–—*\-•·]+\s*")
VIEW_CERTIFICATE_RE = re.compile(r"view certificate:?", re.IGNORECASE)

JOB_TITLE_KEYWORDS = (
    "engineer", "developer", "architect", "manager", "analyst", "consultant",
    "designer", "lead", "senior", "junior", "intern", "director", "specialist",
    "coordinator", "administrator", "technician", "scientist", "programmer",
)

DATE_RANGE_RE = re.compile(
    r"(?P<start>(?:[A-Za-z]{3,9}\.?\s+)?(?:\d{1,2}/)?\d{4})\s*(?:-|–|—|to)\s*"
    r"(?P<end>(?:[A-Za-z]{3,9}\.?\s+)?(?:\d{1,2}/)?\d{4}|present|current|now)",
    re.IGNORECASE,
)
YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")

DEGREE_RE = re.compile(
    r"\b(?:bachelor(?:'s)?|master(?:'s)?|ph\.?\s?d|doctorate|b\.\s?tech|btech|m\.\s?tech|mtech"
    r"|b\.\s?sc|bsc|m\.\s?sc|msc|b\.\s?s\.|m\.\s?s\.|b\.\s?e\.|m\.\s?e\.|b\.\s?a\.|m\.\s?a\."
    r"|bca|mca|mba|diploma|associate(?:'s)? degree|higher secondary)",
    re.IGNORECASE,
)
INSTITUTION_RE = re.compile(
    r"\b(?:university|college|institute|school|academy|polytechnic|iit|nit)\b",
    re.IGNORECASE,
)
CGPA_RE = re.compile(
    r"\b(?:c?gpa|cpi)\b\s*[:\-]?\s*(\d{1,2}(?:\.\d{1,2})?)(?:\s*/\s*\d{1,2}(?:\.\d+)?)?",
    re.IGNORECASE,
)
PERCENT_RE = re.compile(r"(\d{1,3}(?:\.\d{1,2})?)\s*%")


def _clean_line(line: str) -> str:
    return BULLET_RE.sub("", line.strip()).strip()


def _strip_separators(text: str) -> str:
    return text.strip(" \t,;|-–—:()")


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _is_header_shaped(line: str) -> bool:
    return len(line) < HEADER_MAX_CHARS and "http" not in line.lower() and "@" not in line


def _looks_like_other_header(line: str, own_keywords: Tuple[str, ...]) -> bool:
    """A line that opens a different recognized section"""
    lower = line.strip().lower().rstrip(":")
    if any(keyword in lower for keyword in own_keywords):
        return False
    return any(
        lower == keyword
        or lower.startswith(keyword + ":")
        or (len(lower) < HEADER_MAX_CHARS and keyword in lower)
        for keyword in HEADER_KEYWORDS
    )


def find_section(lines: List[str], keywords: Tuple[str, ...]) -> Optional[Tuple[int, int]]:
    """
    Locate a section with a two-pointer scan over the indexed lines

    The header is the first header-shaped line containing one of the
    keywords (falling back to any line containing one). The body runs from
    the line after it up to the next line that opens a different section.

    Returns:
        (start, end) slice bounds of the section body, or None
    """
    header = None
    fallback = None
    for i, line in enumerate(lines):
        lower = line.lower()
        if any(keyword in lower for keyword in keywords):
            if _is_header_shaped(line):
                header = i
                break
            if fallback is None:
                fallback = i
    if header is None:
        header = fallback
    if header is None:
        return None

    start = header + 1
    end = start
    while end < len(lines) and not _looks_like_other_header(lines[end], keywords):
        end += 1
    return start, end


def is_title_line(line: str) -> bool:
    """Short line starting with a capital letter that is not a technologies label"""
    return (
        len(line) < TITLE_MAX_CHARS
        and line[:1].isupper()
        and not TECH_LABEL_RE.match(line)
    )


def segment_projects(section_lines: List[str]) -> List[Dict[str, Any]]:
    """
    Split project-section lines into {"name", "description", "tech"} entries

    A title-shaped line opens a new project. A "Technologies:" line feeds the
    current project's tech list. Longer lines accumulate into its description.
    """
    projects: List[Dict[str, Any]] = []
    current = None
    for raw in section_lines:
        line = _clean_line(raw)
        if not line:
            continue
        tech_label = TECH_LABEL_RE.match(line)
        if tech_label and current is not None:
            tech = re.split(r"\s*[,|]\s*", line[tech_label.end():])
            current["tech"].extend(t for t in tech if t)
        elif is_title_line(line) and raw.strip() == line:
            current = {"name": line, "description": "", "tech": []}
            projects.append(current)
        elif current is not None and len(line) > DESCRIPTION_MIN_CHARS:
            current["description"] = (current["description"] + " " + line).strip()
    return projects


def pair_certification_lines(lines: List[str]) -> List[Dict[str, str]]:
    """
    Turn certification lines into {"name", "link"} entries

    A line followed by a "View Certificate" line takes its link from that
    line and both are consumed. A URL inline in the name is moved to the
    link and stripped (with any "View Certificate" label) from the name.
    """
    entries = []
    i = 0
    while i < len(lines):
        name = _clean_line(lines[i])
        i += 1
        if not name or name.lower().startswith("view certificate"):
            continue

        link = ""
        if i < len(lines) and "view certificate" in lines[i].lower():
            url = URL_RE.search(lines[i])
            if url:
                link = url.group(0).rstrip(URL_TRAILING_PUNCT)
            i += 1

        inline = URL_RE.search(name)
        if inline:
            link = inline.group(0).rstrip(URL_TRAILING_PUNCT)
            name = name.replace(inline.group(0), "")
            name = _strip_separators(VIEW_CERTIFICATE_RE.sub("", name))

        if name:
            entries.append({"name": name, "link": link})
    return entries


class PatternExtractorAgent:
    """
    Agent responsible for heuristic field extraction from raw resume text

    Regex and keyword batteries over a single pass of the text. Optimized
    for common layouts, intentionally lossy.
    """

    def __init__(self):
        self.name = "PatternExtractorAgent"
        logger.info(f"{self.name} initialized")

    # ---------- contact ----------

    def _extract_emails(self, text: str) -> List[str]:
        return _unique(EMAIL_RE.findall(text))

    def _extract_phones(self, text: str) -> List[str]:
        phones = []
        for match in PHONE_RE.finditer(text):
            candidate = match.group(0).strip()
            digits = re.sub(r"\D", "", candidate)
            if PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
                phones.append(candidate)
        return _unique(phones)

    def _extract_links(self, text: str) -> Dict[str, Any]:
        """Collect absolute URLs and classify them into channels"""
        urls = _unique([u.rstrip(URL_TRAILING_PUNCT) for u in URL_RE.findall(text)])
        links: Dict[str, Any] = {channel: "" for channel in LINK_CHANNELS}
        websites = []
        for url in urls:
            channel = classify_url(url)
            if channel and not links[channel]:
                links[channel] = url
            else:
                websites.append(url)

        # Profiles are often printed without a scheme
        if not links["linkedin"]:
            bare = LINKEDIN_BARE_RE.search(text)
            if bare:
                links["linkedin"] = bare.group(0)
        if not links["github"]:
            bare = GITHUB_BARE_RE.search(text)
            if bare:
                links["github"] = bare.group(0)

        links["websites"] = websites
        return links

    # ---------- name / skills ----------

    def _extract_name(self, lines: List[str]) -> str:
        for line in lines[:settings.NAME_SCAN_LINES]:
            lower = line.lower()
            if "resume" in lower or "curriculum" in lower:
                continue
            words = line.split()
            if 2 <= len(words) <= 4 and all(re.fullmatch(r"[A-Z][A-Za-z]*", w) for w in words):
                return " ".join(words)
        return ""

    def _extract_skills(self, text: str) -> List[str]:
        return [display for pattern, display in _SKILL_PATTERNS if pattern.search(text)]

    # ---------- sections ----------

    def _section_lines(self, lines: List[str], section: str) -> List[str]:
        bounds = find_section(lines, SECTION_KEYWORDS[section])
        if bounds is None:
            return []
        start, end = bounds
        return lines[start:end]

    @staticmethod
    def _take_date_range(line: str) -> Tuple[str, str, str]:
        """Split a date range off a line: (rest, start, end)"""
        match = DATE_RANGE_RE.search(line)
        if not match:
            return line, "", ""
        rest = _strip_separators(line[:match.start()] + " " + line[match.end():])
        return " ".join(rest.split()), match.group("start"), match.group("end")

    def _extract_summary(self, lines: List[str]) -> str:
        body = [_clean_line(line) for line in self._section_lines(lines, "summary")]
        return " ".join(line for line in body if line)

    def _extract_projects(self, lines: List[str]) -> List[Dict[str, Any]]:
        return segment_projects(self._section_lines(lines, "projects"))

    def _extract_experience(self, lines: List[str]) -> List[Dict[str, Any]]:
        jobs: List[Dict[str, Any]] = []
        current = None
        for raw in self._section_lines(lines, "experience"):
            line = _clean_line(raw)
            if not line:
                continue
            rest, start, end = self._take_date_range(line)
            is_title = (
                is_title_line(line)
                and raw.strip() == line
                and any(keyword in line.lower() for keyword in JOB_TITLE_KEYWORDS)
            )
            if is_title:
                current = {
                    "jobTitle": rest or line,
                    "organization": "",
                    "startDate": start,
                    "endDate": end,
                    "description": "",
                }
                jobs.append(current)
                continue
            if current is None:
                continue
            if start and not current["startDate"]:
                current["startDate"], current["endDate"] = start, end
                line = rest
            if not line:
                continue
            if not current["organization"] and not current["description"] and is_title_line(line):
                current["organization"] = line
            elif len(line) > DESCRIPTION_MIN_CHARS:
                current["description"] = (current["description"] + " " + line).strip()
        return jobs

    @staticmethod
    def _split_degree_line(line: str) -> Tuple[str, str]:
        """'B.Tech in CSE, IIT Delhi' -> ('B.Tech in CSE', 'IIT Delhi')"""
        parts = [p.strip() for p in re.split(r",|\||\s+at\s+|\s+-\s+", line) if p.strip()]
        degree = next((p for p in parts if DEGREE_RE.search(p)), line)
        institution = next((p for p in parts if p != degree and INSTITUTION_RE.search(p)), "")
        return degree, institution

    def _extract_education(self, lines: List[str]) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        current = None

        def new_entry() -> Dict[str, Any]:
            entry = {"degree": "", "institution": "", "startDate": "", "endDate": "",
                     "percentage": "", "cgpa": ""}
            entries.append(entry)
            return entry

        for raw in self._section_lines(lines, "education"):
            line = _clean_line(raw)
            if not line:
                continue

            cgpa = CGPA_RE.search(line)
            percent = PERCENT_RE.search(line)
            years = YEAR_RE.findall(line)

            text = DATE_RANGE_RE.sub(" ", line)
            text = CGPA_RE.sub(" ", text)
            text = PERCENT_RE.sub(" ", text)
            text = YEAR_RE.sub(" ", text)
            text = _strip_separators(" ".join(text.split()))

            if DEGREE_RE.search(text):
                degree, institution = self._split_degree_line(text)
                if current is None or current["degree"]:
                    current = new_entry()
                current["degree"] = _strip_separators(degree)
                if institution and not current["institution"]:
                    current["institution"] = _strip_separators(institution)
            elif INSTITUTION_RE.search(text):
                if current is None or current["institution"]:
                    current = new_entry()
                current["institution"] = text

            if current is None:
                continue
            if cgpa and not current["cgpa"]:
                current["cgpa"] = cgpa.group(1)
            if percent and not current["percentage"]:
                current["percentage"] = percent.group(1)
            if years and not current["endDate"]:
                if len(years) > 1:
                    current["startDate"], current["endDate"] = years[0], years[-1]
                else:
                    current["endDate"] = years[0]
        return entries

    def _extract_certifications(self, lines: List[str]) -> List[Dict[str, str]]:
        body = [line for line in self._section_lines(lines, "certifications") if line.strip()]
        kept = [
            line for line in body
            if len(line.strip()) > 5 or "view certificate" in line.lower()
        ]
        return pair_certification_lines(kept)

    def _extract_awards(self, lines: List[str]) -> List[str]:
        awards = [_clean_line(line) for line in self._section_lines(lines, "awards")]
        return [award for award in awards if len(award) > 3]

    # ---------- entry point ----------

    def parse_text(self, text: str) -> RawDraft:
        """
        Extract a RawDraft from raw resume text

        Args:
            text: Linear text of the whole document

        Returns:
            RawDraft tagged local-heuristic
        """
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        links = self._extract_links(text)

        draft = RawDraft(
            source=DraftSource.LOCAL_HEURISTIC,
            name=NameField(raw=self._extract_name(lines)),
            emails=self._extract_emails(text),
            phone_numbers=self._extract_phones(text),
            websites=links["websites"],
            linkedin=links["linkedin"],
            github=links["github"],
            twitter=links["twitter"],
            blog=links["blog"],
            whatsapp=links["whatsapp"],
            telegram=links["telegram"],
            summary=self._extract_summary(lines),
            education=self._extract_education(lines),
            work_experience=self._extract_experience(lines),
            skills=self._extract_skills(text),
            projects=self._extract_projects(lines),
            certifications=self._extract_certifications(lines),
            awards=self._extract_awards(lines),
        )

        logger.info(
            f"{self.name}: Pattern extraction complete",
            name_found=bool(draft.name.raw),
            emails=len(draft.emails),
            phones=len(draft.phone_numbers),
            skills=len(draft.skills),
            education=len(draft.education),
            experience=len(draft.work_experience),
            projects=len(draft.projects),
            certifications=len(draft.certifications),
        )
        return draft


# Agent instance
pattern_extractor_agent = PatternExtractorAgent()
