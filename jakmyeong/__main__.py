#!/usr/bin/env python3
"""Entry point for ``python -m jakmyeong``."""

import sys

from jakmyeong.cli import main

sys.exit(main())
