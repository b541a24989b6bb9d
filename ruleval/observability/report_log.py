"""
Report log sink.

Renders a ValidationReport as plain "Info: ...", "Warning: ..." and
"Error: ..." lines and writes them to a timestamped file, one file per run.
"""

from datetime import datetime
from pathlib import Path

from ruleval.core.models import ValidationReport

from .logger import get_logger

logger = get_logger(__name__)

SEVERITY_PREFIX = {
    "info": "Info",
    "warning": "Warning",
    "error": "Error",
}


def report_filename(timestamp: datetime | None = None) -> str:
    """Name of the log file for a run started at ``timestamp`` (default: now)."""
    timestamp = timestamp or datetime.now()
    return f"validation_{timestamp.strftime('%Y%m%d_%H%M%S')}.log"


def render_report(report: ValidationReport) -> list[str]:
    """
    Render every finding as one line, in report order.

    Args:
        report: The validation report

    Returns:
        Lines like "Error: extra column 'notes' is not allowed"
    """
    lines = [f"{SEVERITY_PREFIX[finding.severity]}: {finding.message}" for finding in report.findings]
    lines.append(
        f"Info: validation finished with {len(report.errors)} errors "
        f"and {len(report.warnings)} warnings"
    )
    return lines


class ReportLogWriter:
    """
    Writes rendered reports to ``validation_<YYYYmmdd_HHMMSS>.log`` files.

    Example:
        writer = ReportLogWriter("logs")
        path = writer.write(report)
    """

    def __init__(self, log_dir: str | Path):
        """
        Initialize the writer.

        Args:
            log_dir: Directory for log files (created if missing)
        """
        self.log_dir = Path(log_dir)

    def write(self, report: ValidationReport, timestamp: datetime | None = None) -> Path:
        """
        Write a report to a new log file.

        Args:
            report: The validation report
            timestamp: Run start time used in the file name (default: now)

        Returns:
            Path of the written file
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        path = self.log_dir / report_filename(timestamp)
        path.write_text("\n".join(render_report(report)) + "\n", encoding="utf-8")

        logger.info(f"Wrote validation report to {path}", extra={"report_file": str(path)})
        return path
