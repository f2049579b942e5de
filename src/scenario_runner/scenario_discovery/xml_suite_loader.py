"""Reference suite loader for XML suite definition files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING

from scenario_runner.scenario_execution.scenario_models import Suite

if TYPE_CHECKING:
    from scenario_runner.plugins.extension_points import ResultMode


class SuiteDefinitionError(Exception):
    """Raised when a suite definition file cannot be parsed."""


class XmlSuiteLoader:  # pylint: disable=too-few-public-methods
    """Loads ``<query name="...">`` elements of a suite document in document order.

    The query text is the ``<sql>`` child when present, otherwise the element
    text. Unnamed queries are numbered by position.
    """

    def load(self, definition_path: Path, suite: Suite, result_mode: ResultMode) -> None:
        try:
            root = ET.parse(definition_path).getroot()
        except (ET.ParseError, OSError) as exc:
            raise SuiteDefinitionError(
                f"Cannot parse suite definition {definition_path}: {exc}"
            ) from exc

        seen: set[str] = set()
        for position, element in enumerate(root.iter("query"), start=1):
            query_id = (element.get("name") or "").strip() or f"query_{position}"
            if query_id in seen:
                raise SuiteDefinitionError(
                    f"Duplicate query '{query_id}' in suite definition {definition_path}."
                )
            seen.add(query_id)
            text = element.findtext("sql")
            if text is None:
                text = element.text or ""
            suite.add_query(query_id, text.strip())
