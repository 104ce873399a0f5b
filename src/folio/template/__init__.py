"""Expression templates — ``${…}`` now, ``!{…}`` at request time."""

from folio.template.renderer import TemplateMap, TemplateRenderer, render_file, template_engine
from folio.template.scanner import ScanResult, scan

__all__ = [
    "ScanResult",
    "TemplateMap",
    "TemplateRenderer",
    "render_file",
    "scan",
    "template_engine",
]
