"""
Report and artifact management for the Responsible ML workflow.

Collects the tables, figures and commentary produced by a run and writes
them as a single Markdown report next to the CSV artifacts.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .io_utils import slugify, write_atomic, write_frame

logger = logging.getLogger(__name__)


class ReportBuilder:
    """
    Markdown report made of ordered sections.

    Each section is a heading followed by paragraphs, tables and images.
    Image paths are written relative to the report so the results directory
    can be moved as a whole.
    """

    def __init__(self, results_dir: Union[str, Path], title: str = 'Responsible Machine Learning'):
        self.results_dir = Path(results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self.title = title
        self.blocks: List[str] = []
        self.artifacts: Dict[str, str] = {}
        logger.info(f"ReportBuilder initialized in {self.results_dir}")

    def add_section(self, heading: str, level: int = 2) -> 'ReportBuilder':
        self.blocks.append(f"{'#' * level} {heading}")
        return self

    def add_text(self, text: str) -> 'ReportBuilder':
        self.blocks.append(text.strip())
        return self

    def add_table(self, frame: pd.DataFrame, caption: Optional[str] = None,
                  floatfmt: str = '.4f', index: bool = False) -> 'ReportBuilder':
        if caption:
            self.blocks.append(f"*{caption}*")
        if frame.empty:
            self.blocks.append('_No rows._')
        else:
            self.blocks.append(frame.to_markdown(index=index, floatfmt=floatfmt))
        return self

    def add_image(self, path: Optional[Union[str, Path]], caption: str = '') -> 'ReportBuilder':
        if path is None:
            logger.debug(f"Skipping missing figure '{caption}'")
            return self
        relative = os.path.relpath(Path(path).resolve(), self.results_dir.resolve())
        self.blocks.append(f"![{caption}]({Path(relative).as_posix()})")
        return self

    def save_artifact(self, name: str, frame: pd.DataFrame, label: Optional[str] = None) -> str:
        """Write a CSV artifact named '<name>[_<label>].csv' next to the report."""
        file_name = f"{name}_{slugify(label)}.csv" if label else f"{name}.csv"
        path = write_frame(self.results_dir / file_name, frame)
        self.artifacts[file_name] = path
        return path

    def save_json(self, name: str, payload: Dict[str, Any]) -> str:
        path = self.results_dir / f"{name}.json"
        write_atomic(path, json.dumps(payload, indent=2, default=str))
        self.artifacts[path.name] = str(path)
        return str(path)

    def render(self) -> str:
        header = [f"# {self.title}",
                  f"_Generated {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}_"]
        body = header + self.blocks
        if self.artifacts:
            body.append('## Artifacts')
            body.append('\n'.join(f"- [{name}]({name})" for name in sorted(self.artifacts)))
        return '\n\n'.join(body) + '\n'

    def write(self, file_name: str = 'report.md') -> str:
        path = self.results_dir / file_name
        write_atomic(path, self.render())
        logger.info(f"Report written to {path}")
        return str(path)
