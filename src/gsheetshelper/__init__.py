"""
A helper around the Google Sheets Python client.
The goal is to let a caller describe rows, cells and formatting at a high level
(strings, numbers, dates, colors, alignment) and have them translated into
correctly batched, correctly addressed batchUpdate requests.

Python dataclasses are used for the resource structs and most of the logic is
translating between those and the raw dicts the Google client sends and receives.

The spreadsheet specific pieces live in the sheets subpackage; this level holds
the shared resource base, access/authentication, configuration and errors.
"""
from .errors import *
from .config import SheetsHelperConfig
from .sheets.client import SheetsClient

__version__ = "0.3.0"
