"""Fixtures compartidas: un cliente Sling en memoria."""

import json
from typing import Dict, List, Optional

import pytest

from cqtool.core.diff import DELETE_SUFFIX
from cqtool.core.state import Credentials
from cqtool.jcr.http import HttpResponse, multipart_fields
from cqtool.jcr.schema import NODE_TYPES_ROOT


class FakeSlingClient:
    """Emula GET {path}.json, tipos de nodo y POST multipart de Sling."""

    def __init__(self, nodes: Optional[Dict[str, dict]] = None, node_types: Optional[Dict[str, list]] = None):
        self.nodes = {k: dict(v) for k, v in (nodes or {}).items()}
        self.node_types = node_types or {}
        self.gets: List[str] = []
        self.posts: List[tuple] = []
        self.post_status = 200
        self.post_body = "OK"

    def get(self, path, auth, timeout=None):
        self.gets.append(path)
        if path.startswith(NODE_TYPES_ROOT + "/"):
            name = path[len(NODE_TYPES_ROOT) + 1:-len(".json")]
            if name not in self.node_types:
                return HttpResponse(404, "Not Found")
            return HttpResponse(200, json.dumps({"rep:protectedProperties": self.node_types[name]}))
        node = self.nodes.get(path[:-len(".json")])
        if node is None:
            return HttpResponse(404, "Not Found")
        return HttpResponse(200, json.dumps(node))

    def multipart_post(self, path, auth, payload, timeout=None):
        self.posts.append((path, dict(payload)))
        if self.post_status >= 300:
            return HttpResponse(self.post_status, self.post_body)
        if payload.get(":operation") == "delete":
            self.nodes.pop(path, None)
            return HttpResponse(200, self.post_body)
        created = path not in self.nodes
        node = self.nodes.setdefault(path, {})
        for key, value in self.stored_values(payload).items():
            if key.endswith(DELETE_SUFFIX):
                node.pop(key[:-len(DELETE_SUFFIX)], None)
            else:
                node[key] = value
        return HttpResponse(201 if created else 200, self.post_body)

    @staticmethod
    def stored_values(payload):
        """Lo que Sling guardaría a partir de los campos multipart."""
        hints, ignore_blanks, values = {}, set(), {}
        for key, (_, value) in multipart_fields(payload):
            if key.endswith("@TypeHint"):
                hints[key[:-len("@TypeHint")]] = value
            elif key.endswith("@IgnoreBlanks"):
                ignore_blanks.add(key[:-len("@IgnoreBlanks")])
            else:
                values.setdefault(key, []).append(value)
        stored = {}
        for key, vs in values.items():
            if key in ignore_blanks:
                vs = [v for v in vs if v]
            stored[key] = vs if hints.get(key, "").endswith("[]") else vs[-1]
        return stored

    @property
    def schema_gets(self) -> List[str]:
        return [p for p in self.gets if p.startswith(NODE_TYPES_ROOT)]


@pytest.fixture
def credentials():
    return Credentials("admin", "admin")


@pytest.fixture
def fake_client():
    return FakeSlingClient()
