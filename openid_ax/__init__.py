#-*-coding: utf-8-*-
"""
OpenID 2.0 authentication requests and the Attribute Exchange 1.0
extension for Relying Parties.

See :mod:`openid_ax.consumer` for building the redirect to a provider and
:mod:`openid_ax.ax` for requesting and reading user attributes.

.. code-block:: none

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions
    and limitations under the License.
"""

version_info = (0, 1, 0)

__version__ = ".".join(str(x) for x in version_info)

__all__ = [
    'ax',
    'consumer',
    'discover',
    'fetchers',
    'message',
]
