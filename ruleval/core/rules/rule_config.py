"""
Rules file loading.

Reads a rules file from disk and compiles it into a Ruleset.
"""

from pathlib import Path

from ruleval.core.errors import RulesFileAccessError
from ruleval.core.models import Ruleset
from ruleval.core.schema import DateFormatCatalog
from ruleval.observability.logger import get_logger

from .parser import RulesetParser

logger = get_logger(__name__)


class RulesFileLoader:
    """
    Loads a ruleset from a UTF-8 rules file.

    Expected file format:
    ```
    allowed null values in ['NA']
    column names in ['id', 'amount']
    all columns required

    column: 'id'
        has value type integer
        is unique

    column: 'amount'
        has value type floating point
        is >= 0
    ```
    """

    def __init__(self, rules_path: str | Path, catalog: DateFormatCatalog | None = None):
        """
        Initialize the rules file loader.

        Args:
            rules_path: Path to the rules file
            catalog: Date formats accepted by ``has format`` rules

        Raises:
            RulesFileAccessError: If the file does not exist
        """
        self.rules_path = Path(rules_path)
        self.catalog = catalog
        if not self.rules_path.is_file():
            raise RulesFileAccessError(str(rules_path), "file not found")

    def read_text(self) -> str:
        """
        Read the raw rules text.

        Raises:
            RulesFileAccessError: If the file cannot be read or is not UTF-8
        """
        try:
            return self.rules_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise RulesFileAccessError(str(self.rules_path), f"not valid UTF-8 ({e.reason})")
        except OSError as e:
            raise RulesFileAccessError(str(self.rules_path), e.strerror or str(e))

    def load(self) -> Ruleset:
        """
        Load and compile the rules file.

        Returns:
            The compiled Ruleset

        Raises:
            RulesFileAccessError: If the file cannot be read
            ParseError: If the rules are malformed
        """
        ruleset = RulesetParser(self.catalog).parse(self.read_text())
        logger.info(
            f"Loaded rules from {self.rules_path}",
            extra={
                "rules_file": str(self.rules_path),
                "column_blocks": len(ruleset.blocks),
                "conditional_rules": len(ruleset.conditionals),
            },
        )
        return ruleset
