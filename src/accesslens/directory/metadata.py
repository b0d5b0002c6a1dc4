"""Sharing-rule metadata retrieval via the ``sf`` CLI."""

from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import xmltodict
from xml.parsers.expat import ExpatError

from ..exceptions import MalformedMetadataError, RuleSourceError
from ..interfaces import BaseRuleSource
from .cli import run_sf, target_org_args

logger = logging.getLogger(__name__)


def find_rules_file(root: Path, object_name: str) -> Optional[Path]:
    """Locate ``<object>.sharingRules`` (mdapi) or ``.sharingRules-meta.xml`` (source)."""
    prefix = f"{object_name}.sharingRules"
    for path in sorted(root.rglob(f"{prefix}*")):
        if path.is_file() and (path.name == prefix or path.name.endswith(".xml")):
            return path
    return None


def load_rules_document(path: Path) -> Dict[str, Any]:
    """Parse a sharing-rules XML file into a plain dict tree.

    The raw bytes go to the parser, which honours the XML declaration's
    encoding.

    Raises:
        MalformedMetadataError: the file is not well-formed or not decodable.
    """
    try:
        return xmltodict.parse(path.read_bytes())
    except (ExpatError, UnicodeDecodeError) as e:
        raise MalformedMetadataError(f"Unreadable sharing rules document {path.name}: {e}") from e


class CliRuleSource(BaseRuleSource):
    """Retrieves ``SharingRules:<object>`` into a private temp directory.

    The directory is removed after every fetch, so concurrent fetches for
    different objects do not see each other's files.
    """

    def __init__(
        self,
        sf_cli_path: str = "sf",
        target_org: Optional[str] = None,
        timeout: Optional[float] = 120.0,
    ):
        self.sf_cli_path = sf_cli_path
        self.target_org = target_org
        self.timeout = timeout

    async def fetch(self, object_name: str) -> Optional[Dict[str, Any]]:
        with tempfile.TemporaryDirectory(prefix="accesslens-rules-") as tmp:
            try:
                result = await run_sf(
                    self.sf_cli_path,
                    "project",
                    "retrieve",
                    "start",
                    "-m",
                    f"SharingRules:{object_name}",
                    "-r",
                    tmp,
                    *target_org_args(self.target_org),
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise RuleSourceError(f"Cannot run {self.sf_cli_path}: {e}") from e
            except asyncio.TimeoutError as e:
                raise RuleSourceError(
                    f"Sharing rules retrieval timed out for {object_name}", timeout=self.timeout
                ) from e
            if not result.ok:
                raise RuleSourceError(
                    f"Sharing rules retrieval failed for {object_name}",
                    returncode=result.returncode,
                    stderr=result.stderr.strip(),
                )

            path = find_rules_file(Path(tmp), object_name)
            if path is None:
                logger.info("No sharing rules document for %s", object_name)
                return None
            return load_rules_document(path)


__all__ = ["CliRuleSource", "find_rules_file", "load_rules_document"]
