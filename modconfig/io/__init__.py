# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Input helpers for modconfig.

Public API:

- load_document: Read a file path or http(s) URL and parse it as YAML
- read_location: Read a file path or http(s) URL as text
- make_session: requests.Session with retry/backoff defaults
"""

from .fetch import is_url, load_document, make_session, read_location

__all__ = ["is_url", "load_document", "make_session", "read_location"]
