# coding=utf-8
# fetch.py
# Part of AxiLang, a scripting language for the AxiDraw
#
# Copyright 2026 The AxiLang Authors
#
# The MIT License (MIT)
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
fetch.py

Download plot files given to SETPLOT as http(s) URLs.

Redirects are followed one hop at a time, so that each hop is logged,
up to a fixed number of hops. The downloaded file is saved to a new
temporary file; whoever asked for it is responsible for removing it.
"""

import logging
import os
import re
import tempfile
from urllib.parse import urljoin, urlparse

import requests

from axilang import messages
from axilang.diagnostics import FatalError

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"https?://.*")
REDIRECT_CODES = (301, 302, 303, 307, 308)


def is_url(text):
    return URL_PATTERN.fullmatch(text) is not None


def clean_text(text):
    '''Escape control characters, so that a URL prints on one line'''
    return text.encode('unicode_escape').decode('ascii')


class ResourceFetcher:
    """ Resolve a URL to a local temporary file """

    def __init__(self, params=None, session=None):
        self.params = messages.default_params() if params is None else params
        self.session = requests if session is None else session

    @property
    def max_redirects(self):
        return self.params.max_redirects

    def fetch(self, url):
        '''Download `url` and return the path of the temporary file holding it'''
        hops = 0
        while True:
            indent = "  " * (hops + 1)
            logger.debug(f"{indent}Downloading file from \"{clean_text(url)}\".")
            response = self._get(url)

            if response.status_code in REDIRECT_CODES:
                location = response.headers.get('Location')
                if not location:
                    raise FatalError(f"Redirect from \"{clean_text(url)}\" has no location.")
                hops += 1
                if hops > self.max_redirects:
                    raise FatalError("Too many redirects.")
                url = urljoin(url, location)
                logger.debug(f"{indent}Redirecting to \"{clean_text(url)}\".")
                continue

            if not 200 <= response.status_code < 300:
                raise FatalError(f"Could not download file from \"{clean_text(url)}\" "
                                 f"(HTTP {response.status_code}).")

            return self._save(url, response.content, indent)

    def _get(self, url):
        headers = {'User-Agent': self.params.user_agent}
        try:
            return self.session.get(url, allow_redirects=False, headers=headers,
                                    timeout=self.params.fetch_timeout)
        except requests.RequestException as err:
            raise FatalError(f"Could not download file from \"{clean_text(url)}\".") from err

    def _save(self, url, content, indent):
        logger.debug(f"{indent}Creating temporary file.")
        suffix = os.path.splitext(urlparse(url).path)[1]
        try:
            file_descriptor, temp_path = tempfile.mkstemp(prefix=self.params.temp_prefix,
                                                          suffix=suffix)
        except OSError as err:
            raise FatalError("Could not create temporary file for plot.") from err
        try:
            with os.fdopen(file_descriptor, 'wb') as temp_file:
                temp_file.write(content)
        except OSError as err:
            os.remove(temp_path)
            raise FatalError(f"Could not write temporary file '{temp_path}'.") from err
        logger.debug(f"{indent}Saved to: {temp_path}")
        return temp_path
