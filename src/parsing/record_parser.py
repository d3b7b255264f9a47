"""
Record Parser
Turns the extraction service's annotated text into an ordered field -> value record
"""
from datetime import datetime
from typing import Callable, Dict, Optional

import config

FIELD_DELIMITER = ':**'
BOLD_MARKER = '**'


def clean_field_label(raw_field: str) -> str:
    """
    Make a human-readable column label from a raw field name.

    Strips every ``**`` marker and turns underscores into spaces,
    e.g. ``**City_Name**`` -> ``City Name``.
    """
    return raw_field.strip().replace(BOLD_MARKER, '').replace('_', ' ').strip()


def clean_field_value(raw_value: str) -> str:
    """Strip ``**`` markers and surrounding whitespace from a value."""
    return raw_value.strip().replace(BOLD_MARKER, '').strip()


def format_extraction_date(moment: datetime) -> str:
    """Local timestamp in the configured human-readable format."""
    return moment.strftime(config.EXTRACTION_DATE_FORMAT)


class RecordParser:
    """Parse ``<label>:**<value>`` lines into a record"""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, logger=None):
        """
        Args:
            clock: Returns the current local time (injectable for tests)
            logger: Optional ExtractorLogger
        """
        self.clock = clock or datetime.now
        self.logger = logger

    def parse_fields(self, raw: str) -> Dict[str, str]:
        """
        Parse only the significant lines of ``raw``.

        A line is significant iff it contains ``:**``; it is split at the
        first occurrence. A repeated label keeps its first position and takes
        the later value. Empty labels or values are kept as empty strings.
        """
        fields: Dict[str, str] = {}
        if not raw:
            return fields

        for line in raw.splitlines():
            if FIELD_DELIMITER not in line:
                continue
            raw_field, raw_value = line.split(FIELD_DELIMITER, 1)
            fields[clean_field_label(raw_field)] = clean_field_value(raw_value)

        return fields

    def parse(self, raw: str, source_url: str) -> Dict[str, str]:
        """
        Build the full record for one submission.

        Args:
            raw: Annotated text returned by the extraction service
            source_url: URL the text was extracted from

        Returns:
            Ordered dict of parsed fields followed by
            ``Extraction Date`` and ``Source URL`` as the last two keys
        """
        record = self.parse_fields(raw)

        # Derived fields always land in the final two positions
        record.pop(config.EXTRACTION_DATE_FIELD, None)
        record.pop(config.SOURCE_URL_FIELD, None)
        record[config.EXTRACTION_DATE_FIELD] = format_extraction_date(self.clock())
        record[config.SOURCE_URL_FIELD] = source_url

        if self.logger:
            self.logger.log_record(len(record), source_url)

        return record


def parse_record(raw: str, source_url: str) -> Dict[str, str]:
    """Module-level shortcut for ``RecordParser().parse``."""
    return RecordParser().parse(raw, source_url)
