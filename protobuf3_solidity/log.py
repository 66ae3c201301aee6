# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Tools for configuring Python logging in the protoc plugin.

protoc reads the plugin's response from stdout, so every log line goes to
stderr.
"""

import logging
import sys
from typing import NamedTuple


def _make_color(*codes):
    # Apply all the requested ANSI color codes. Note that this is unbalanced
    # with respect to the reset, which only requires a '0' to erase all codes.
    start = ''.join(f'\033[{code}m' for code in codes)
    reset = '\033[0m'

    return lambda msg: f'{start}{msg}{reset}'


class _LogLevel(NamedTuple):
    level: int
    color: str
    ascii: str


_COLORS = {
    'bold_red': _make_color(30, 41),
    'red': _make_color(31, 1),
    'yellow': _make_color(33, 1),
    'magenta': _make_color(35, 1),
    'blue': _make_color(34, 1),
}

# Shorten all the log levels to 3 characters for column-aligned logs.
_LOG_LEVELS = (
    _LogLevel(logging.CRITICAL, 'bold_red', 'CRT'),
    _LogLevel(logging.ERROR,    'red',      'ERR'),
    _LogLevel(logging.WARNING,  'yellow',   'WRN'),
    _LogLevel(logging.INFO,     'magenta',  'INF'),
    _LogLevel(logging.DEBUG,    'blue',     'DBG'),
)  # yapf: disable

_STDERR_HANDLER = logging.StreamHandler(sys.stderr)


def install(
    level: int = logging.WARNING, use_color: bool | None = None
) -> None:
    """Configures the root logger to write short level names to stderr."""
    if use_color is None:
        use_color = sys.stderr.isatty()

    formatter = logging.Formatter('%(levelname)s %(message)s')

    # Set the log level on the root logger to 1, so logs that all logs
    # propagated from child loggers are handled.
    logging.getLogger().setLevel(1)

    _STDERR_HANDLER.setLevel(level)
    _STDERR_HANDLER.setFormatter(formatter)
    if _STDERR_HANDLER not in logging.getLogger().handlers:
        logging.getLogger().addHandler(_STDERR_HANDLER)

    for log_level in _LOG_LEVELS:
        name = log_level.ascii
        if use_color:
            name = _COLORS[log_level.color](name)
        logging.addLevelName(log_level.level, name)


def set_level(level: int) -> None:
    """Changes the level of the stderr handler installed by install()."""
    _STDERR_HANDLER.setLevel(level)
