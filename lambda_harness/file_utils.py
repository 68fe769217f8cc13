"""
File helpers for tests that run an executable and check the file it writes.
"""
import csv
import os
import subprocess
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree

from openpyxl import load_workbook
from pypdf import PdfReader

from lambda_harness.errors import UnsupportedFileTypeError
from lambda_harness.polling import TimeoutPolicy, poll_until


FILE_POLL_INTERVAL_MS = 500


# ==============================================================================
# Waiting and running
# ==============================================================================

def wait_for_file(file_path: str, timeout_ms: int = 10000) -> bool:
    """
    Wait for file_path to exist.

    Returns:
        True if the file appeared before the timeout, False otherwise
    """
    outcome = poll_until(
        lambda: os.path.exists(file_path),
        bool,
        f"file {file_path}",
        timeout_ms=timeout_ms,
        interval_ms=FILE_POLL_INTERVAL_MS,
        on_timeout=TimeoutPolicy.RETURN,
    )
    return outcome.satisfied


def run_executable(executable_path: str, *args: str, timeout_s: Optional[float] = None) -> subprocess.CompletedProcess:
    """
    Run an executable to completion and capture its output.

    A non-zero exit code is not an error here; the caller asserts on
    returncode.
    """
    completed = subprocess.run(
        [executable_path, *args],
        capture_output=True,
        text=True,
        timeout=timeout_s,
        check=False
    )
    print(f"Executable output: {completed.stdout}")
    if completed.stderr:
        print(f"Executable error: {completed.stderr}")
    return completed


# ==============================================================================
# Parsers
# ==============================================================================

def parse_pdf(file_path: str) -> str:
    """Text of every page, joined with newlines."""
    reader = PdfReader(file_path)
    return '\n'.join(page.extract_text() or '' for page in reader.pages)


def _element_to_dict(element: ElementTree.Element) -> Any:
    # Leaf elements without attributes collapse to their text
    children = list(element)
    text = (element.text or '').strip()
    if not children and not element.attrib:
        return text

    node: Dict[str, Any] = {}
    if element.attrib:
        node['$'] = dict(element.attrib)
    if text:
        node['_'] = text
    for child in children:
        node.setdefault(child.tag, []).append(_element_to_dict(child))
    return node


def parse_xml(file_path: str) -> Dict[str, Any]:
    """
    Parse XML into nested dicts.

    The result is keyed by the root tag. Child elements are always lists
    (repeated tags accumulate), attributes sit under '$' and mixed text
    under '_'.
    """
    root = ElementTree.parse(file_path).getroot()
    return {root.tag: _element_to_dict(root)}


def parse_csv(file_path: str) -> List[Dict[str, str]]:
    """Rows as dicts keyed by the header row."""
    with open(file_path, newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))


def parse_xlsx(file_path: str) -> List[Dict[str, Any]]:
    """
    Rows of the first worksheet as dicts keyed by its header row.

    Empty cells are left out of each row; fully empty rows are skipped.
    """
    workbook = load_workbook(file_path, read_only=True, data_only=True)
    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        records = []
        for row in rows:
            record = {
                str(name): value
                for name, value in zip(header, row)
                if name is not None and value is not None
            }
            if record:
                records.append(record)
        return records
    finally:
        workbook.close()


def parse_txt(file_path: str) -> str:
    with open(file_path, encoding='utf-8') as f:
        return f.read()


PARSERS = {
    '.pdf': parse_pdf,
    '.xml': parse_xml,
    '.csv': parse_csv,
    '.xlsx': parse_xlsx,
    '.txt': parse_txt,
}


def parse_file(file_path: str) -> Any:
    """
    Parse a file with the parser for its extension.

    Raises:
        UnsupportedFileTypeError: No parser for the extension
    """
    extension = os.path.splitext(file_path)[1].lower()
    parser = PARSERS.get(extension)
    if parser is None:
        raise UnsupportedFileTypeError(extension)
    return parser(file_path)
