"""
Allure attachment helpers shared by page objects and fixtures.

Scenario evidence (lookup results, captured API responses, page URLs and
screenshots) goes through these so every attachment gets a consistent type.
"""

import json
from pathlib import Path
from typing import Any, Union

import allure


def attach_json(data: Any, name: str = "Scenario Data"):
    """
    Attach `data` as indented JSON.

    Values JSON cannot encode (dates, paths, enums) are attached as their
    string form instead of failing the scenario.
    """
    allure.attach(
        json.dumps(data, indent=2, default=str, ensure_ascii=False),
        name=name,
        attachment_type=allure.attachment_type.JSON,
    )


def attach_text(text: Any, name: str = "Page Info"):
    allure.attach(str(text), name=name, attachment_type=allure.attachment_type.TEXT)


def attach_png(source: Union[bytes, Path], name: str = "Screenshot"):
    """
    Attach a PNG image, given as raw bytes or a file path.
    """
    if isinstance(source, Path):
        allure.attach.file(
            str(source),
            name=name,
            attachment_type=allure.attachment_type.PNG
        )
        return
    allure.attach(
        source,
        name=name,
        attachment_type=allure.attachment_type.PNG
    )
