"""XML catalog loader — reads, validates, normalises and writes `<tests>` catalogs.

Catalog layout::

    <tests>
      <test>
        <sample>subdir/a.ts</sample>
        <cmd>-autoprogram</cmd>
        <result>subdir/a.txt</result>
      </test>
    </tests>
"""

import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError

from ccx_tester.catalog.domain.entry import TestEntry
from ccx_tester.catalog.domain.observer import CatalogObserver
from ccx_tester.catalog.infrastructure.errors import CatalogLoadError, CatalogSaveError

_ROOT_TAG = "tests"
_ENTRY_TAG = "test"
_FIELD_TAGS = ("sample", "cmd", "result")


def convert_folder_delimiters(path: str, separator: str = os.sep) -> str:
    """Rewrite a catalog path written on another platform to use `separator`.

    Catalogs authored on Windows use backslashes; on POSIX the backslash is
    replaced, and on Windows the forward slash is.
    """
    foreign = "\\" if separator == "/" else "/"
    return path.replace(foreign, separator)


class XmlCatalogLoader:
    """Loads and saves TestEntry catalogs in the `<tests><test>...</test></tests>` format."""

    def __init__(self, observer: CatalogObserver) -> None:
        self._observer = observer

    def load(self, path: Path) -> list[TestEntry]:
        """
        Load every entry from the catalog at path, in document order.

        Collects ALL structural problems before raising a single CatalogLoadError.

        Raises:
            CatalogLoadError: if the file is missing, is not well-formed XML,
                or any entry is missing a required element.
        """
        path_str = str(path)
        self._observer.catalog_loading_started(path=path_str)

        if not path.is_file():
            self._fail(path=path_str, reason=f"file not found: {path_str}")

        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as exc:
            self._fail(path=path_str, reason=f"malformed XML: {exc}")

        if root.tag != _ROOT_TAG:
            self._fail(
                path=path_str,
                reason=f"root element must be <{_ROOT_TAG}>, found <{root.tag}>",
            )

        entries: list[TestEntry] = []
        errors: list[str] = []
        for index, element in enumerate(root, start=1):
            result = self._parse_entry(element=element, index=index)
            if isinstance(result, str):
                errors.append(result)
                continue
            entries.append(result)
            self._observer.catalog_entry_loaded(
                index=index, sample_file=result.sample_file
            )

        if errors:
            self._fail(path=path_str, reason="; ".join(errors))

        self._observer.catalog_loading_completed(
            path=path_str, total_entries=len(entries)
        )
        return entries

    def save(self, entries: list[TestEntry], path: Path) -> None:
        """
        Write entries to path in catalog order.

        Raises:
            CatalogSaveError: if the file cannot be written.
        """
        root = ET.Element(_ROOT_TAG)
        for entry in entries:
            test = ET.SubElement(root, _ENTRY_TAG)
            ET.SubElement(test, "sample").text = entry.sample_file
            ET.SubElement(test, "cmd").text = entry.command
            ET.SubElement(test, "result").text = entry.expected_result_file

        tree = ET.ElementTree(root)
        ET.indent(tree)
        try:
            tree.write(path, encoding="UTF-8", xml_declaration=True)
        except OSError as exc:
            raise CatalogSaveError(f"{path}: {exc}") from exc

        self._observer.catalog_saved(path=str(path), total_entries=len(entries))

    def _parse_entry(self, element: ET.Element, index: int) -> TestEntry | str:
        """Return a TestEntry, or an error string describing what is wrong with element."""
        if element.tag != _ENTRY_TAG:
            return f"entry {index}: unexpected element <{element.tag}>"

        values: dict[str, str] = {}
        problems: list[str] = []
        for tag in _FIELD_TAGS:
            found = element.findall(tag)
            if len(found) != 1:
                problems.append(f"expected exactly one <{tag}>, found {len(found)}")
                continue
            values[tag] = (found[0].text or "").strip()

        if problems:
            return f"entry {index}: " + ", ".join(problems)

        try:
            return TestEntry(
                sample_file=convert_folder_delimiters(values["sample"]),
                command=values["cmd"],
                expected_result_file=convert_folder_delimiters(values["result"]),
            )
        except ValidationError as exc:
            fields = ", ".join(
                f"'{err['loc'][0]}'" for err in exc.errors() if err["loc"]
            )
            return f"entry {index}: empty value for {fields}"

    def _fail(self, path: str, reason: str) -> NoReturn:
        self._observer.catalog_loading_failed(path=path, reason=reason)
        raise CatalogLoadError(reason=reason)
