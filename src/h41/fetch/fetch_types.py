"""
Purpose
-------
Record type for a fetched H.4.1 edition.

Conventions
-----------
- Dates are ISO `YYYY-MM-DD` strings; `fetched_at` is a UTC ISO-8601
  timestamp.
- Editions are immutable once created and are not persisted by this
  package.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Edition:
    """
    Purpose
    -------
    One successfully fetched and validated weekly publication.

    Attributes
    ----------
    publication_date : str
        Release date the edition was requested for (the URL date).
    as_of_date : str or None
        Balance date ("Week ended ...") declared by the document.
    source_url : str
        URL the HTML was fetched from.
    fetched_at : str
        UTC timestamp of the successful fetch.
    html : str
        Raw document body.
    """

    publication_date: str
    as_of_date: str | None
    source_url: str
    fetched_at: str
    html: str
