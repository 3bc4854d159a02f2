#!/usr/bin/env python3
"""
Term dates source
-----------------
Builds an AcademicCalendar from a term-dates JSON document, and produces that
document by scraping the Queensland Department of Education term dates page:
  https://education.qld.gov.au/about-us/calendar/term-dates

Usage:
  python -m enrolment.services.term_dates --out term_dates.json --pretty

Point the TERM_DATES_FILE setting at the written file to replace the
built-in 2025 term table.
"""
from __future__ import annotations

import argparse
import json
import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup, NavigableString, Tag

from enrolment.config import settings
from enrolment.exceptions import InvalidCalendar
from enrolment.services.academic_calendar import AcademicCalendar, Term

log = logging.getLogger(__name__)

MONTHS = {
    "January": 1, "February": 2, "March": 3, "April": 4,
    "May": 5, "June": 6, "July": 7, "August": 8,
    "September": 9, "October": 10, "November": 11, "December": 12
}

TERM_LINE_RE = re.compile(
    r"Term\s+([1-4])\s*:\s*(.*?)\s+to\s+(.*?)\s*[—–-]\s*([0-9]+)\s*weeks?",
    re.IGNORECASE | re.DOTALL,
)

HEADING_RE = re.compile(r"^h[1-6]$", re.IGNORECASE)
YEAR_RE = re.compile(r"\b(20[0-9]{2})\b")


def normalize_text(s: str) -> str:
    """Normalize dash variants; keep newlines intact for multiline regex."""
    return s.replace("\u2013", "-").replace("\u2014", "-").replace("--", "-")


def parse_date(text: str, year: int) -> str:
    """
    Convert 'Tuesday 28 January' or '28 January' to 'YYYY-MM-DD'.
    """
    text = text.strip().replace("\xa0", " ")
    parts = text.split()
    if parts and not parts[0][0].isdigit():
        parts = parts[1:]
    if len(parts) < 2:
        raise ValueError(f"Unrecognized date format: {text!r}")
    day = int(re.sub(r"[^0-9]", "", parts[0]))
    month = MONTHS.get(parts[1].capitalize())
    if not month:
        raise ValueError(f"Unknown month in {text!r}")
    return date(year, month, day).isoformat()


def get_last_updated(soup: BeautifulSoup) -> Optional[str]:
    text_all = soup.get_text(" ", strip=True)
    m = re.search(r"Last updated\s+([0-9]{1,2}\s+\w+\s+[0-9]{4})", text_all, flags=re.I)
    if not m:
        return None
    try:
        return datetime.strptime(m.group(1), "%d %B %Y").date().isoformat()
    except ValueError:
        return None


def collect_block_text_until_next_year(start: Tag) -> str:
    """Concatenated text from `start` up to the next heading naming a year."""
    collected: List[str] = []
    for node in start.next_elements:
        if (
            isinstance(node, Tag)
            and HEADING_RE.match(node.name or "")
            and YEAR_RE.search(node.get_text(" ", strip=True))
        ):
            break
        if isinstance(node, NavigableString):
            t = str(node).strip()
            if t:
                collected.append(t)
    return normalize_text("\n".join(collected))


def extract_terms(text_block: str, year: int) -> List[Dict[str, Any]]:
    """Parse every 'Term N: <start> to <end> — W weeks' line, one entry per term number."""
    by_number: Dict[int, Dict[str, Any]] = {}
    for m in TERM_LINE_RE.finditer(text_block):
        num = int(m.group(1))
        start_text = m.group(2).strip()
        end_text = m.group(3).strip()
        try:
            start_iso = parse_date(start_text, year)
            end_iso = parse_date(end_text, year)
        except ValueError:
            log.warning("Skipping unparseable term line for %s: %r", year, m.group(0))
            continue
        by_number[num] = {
            "number": num,
            "name": f"Term {num}",
            "start_date": start_iso,
            "end_date": end_iso,
            "weeks": int(m.group(4)),
        }
    return [by_number[n] for n in sorted(by_number)]


def parse_term_dates_html(html: str, source: str = "") -> Dict[str, Any]:
    """Turn the term dates page into {"source", "last_updated", "years": [...]}."""
    soup = BeautifulSoup(html, "html.parser")
    years_data: List[Dict[str, Any]] = []
    seen = set()

    # One heading per year ("2026"), then subheadings and the term lines
    for h in soup.find_all(HEADING_RE):
        ym = YEAR_RE.search(h.get_text(" ", strip=True))
        if not ym:
            continue
        year = int(ym.group(1))
        if year in seen:
            continue
        terms = extract_terms(collect_block_text_until_next_year(h), year)
        if terms:
            years_data.append({"year": year, "terms": terms})
            seen.add(year)

    return {
        "source": source,
        "last_updated": get_last_updated(soup),
        "years": years_data,
    }


def scrape_term_dates(url: Optional[str] = None) -> Dict[str, Any]:
    url = url or settings.TERM_DATES_URL
    headers = {"User-Agent": "Mozilla/5.0 (compatible; PreEnrolmentTermDates/1.0)"}
    resp = requests.get(url, headers=headers, timeout=30)
    resp.raise_for_status()
    data = parse_term_dates_html(resp.text, source=url)
    log.info("Scraped term dates for %d year(s) from %s", len(data["years"]), url)
    return data


def calendar_from_year_data(year_data: Dict[str, Any]) -> AcademicCalendar:
    try:
        year = int(year_data["year"])
        terms = [
            Term(
                number=int(t["number"]),
                start_date=date.fromisoformat(t["start_date"]),
                end_date=date.fromisoformat(t["end_date"]),
            )
            for t in sorted(year_data["terms"], key=lambda t: int(t["number"]))
        ]
    except InvalidCalendar:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidCalendar(f"Malformed term dates entry: {e}") from e
    return AcademicCalendar(year=year, terms=tuple(terms))


def load_calendar(path: str, year: Optional[int] = None) -> AcademicCalendar:
    """Read a term dates JSON file and build the calendar for `year` (first entry if omitted)."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    years = data.get("years") or []
    if not years:
        raise InvalidCalendar(f"No term dates found in {path}")
    if year is None:
        return calendar_from_year_data(years[0])
    for entry in years:
        if int(entry.get("year", 0)) == year:
            return calendar_from_year_data(entry)
    raise InvalidCalendar(f"No term dates for {year} in {path}")


def main(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="Scrape QLD term dates to JSON.")
    ap.add_argument("--url", default=settings.TERM_DATES_URL, help="Term dates page to scrape.")
    ap.add_argument("--out", help="Path to write JSON. If omitted, prints to stdout.")
    ap.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = ap.parse_args(argv)

    data = scrape_term_dates(args.url)

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2 if args.pretty else None)
        print(f"Wrote {args.out}")
    else:
        print(json.dumps(data, ensure_ascii=False, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
