"""Allow ``python -m html_pdf_api``."""

import sys

from .cli import main

sys.exit(main())
