"""API documentation — OpenAPI documents per version and an HTML index.

Built from the capability manifest when the app freezes::

    app = App()
    ...
    app.openapi("v2")        # the OpenAPI dict for version 2.0
    # GET /openapi/v2.json   # the same document over HTTP
    # GET /docs              # index of all documents
"""

from verso.docs.openapi import build_openapi, document_title
from verso.docs.site import DocsSite

__all__ = ["DocsSite", "build_openapi", "document_title"]
