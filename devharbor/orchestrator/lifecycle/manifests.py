"""Manifest rendering for the objects a workspace is made of.

Each object is a Jinja2 template producing YAML text; every substituted value
passes through ``tojson`` so image references, hostnames etc. can never break
the document structure.  Rendering is pure: same parameters, same output.

Template variables:

- ``name``       : str -- workspace name (also the Service name)
- ``url_prefix`` : str -- hostname prefix, doubles as the app port name
- ``host``       : str -- ``<url_prefix>.<url_suffix>``
- ``cpu``        : str -- CPU quantity (default ``1000m``)
- ``memory``     : str -- memory quantity (default ``2048Mi``)
- ``template_id``: str
- ``image``      : str
"""

from __future__ import annotations

from dataclasses import dataclass

import jinja2
import yaml

from devharbor.orchestrator.models.enums import ResourceKind
from devharbor.orchestrator.models.release import release_key

DEFAULT_CPU = "1000m"
DEFAULT_MEMORY = "2048Mi"

OWNER_LABEL = "cloud.sealos.io/devbox-manager"
"""Binds services and routes to their workspace for label-selector cleanup."""

DOMAIN_LABEL = "cloud.sealos.io/app-deploy-manager-domain"
"""Carries the precomputed external host of a workspace."""

APP_PORT = 8080


def owner_selector(workspace: str) -> str:
    """Label selector matching every object owned by *workspace*."""
    return f"{OWNER_LABEL}={workspace}"


WORKSPACE_TEMPLATE = """\
apiVersion: devbox.sealos.io/v1alpha1
kind: Devbox
metadata:
  name: {{ name | tojson }}
spec:
  squash: false
  network:
    type: NodePort
    extraPorts:
      - containerPort: {{ app_port }}
  resource:
    cpu: {{ cpu | tojson }}
    memory: {{ memory | tojson }}
  templateID: {{ template_id | tojson }}
  image: {{ image | tojson }}
  config:
    appPorts:
      - port: {{ app_port }}
        name: {{ url_prefix | tojson }}
        protocol: TCP
        targetPort: {{ app_port }}
    ports:
      - containerPort: 22
        name: devbox-ssh-port
        protocol: TCP
    releaseArgs:
      - /home/devbox/project/entrypoint.sh prod
    releaseCommand:
      - /bin/bash
      - '-c'
    user: devbox
    workingDir: /home/devbox/project
  state: Running
  tolerations:
    - key: devbox.sealos.io/node
      operator: Exists
      effect: NoSchedule
  affinity:
    nodeAffinity:
      requiredDuringSchedulingIgnoredDuringExecution:
        nodeSelectorTerms:
          - matchExpressions:
              - key: devbox.sealos.io/node
                operator: Exists
"""

SERVICE_TEMPLATE = """\
apiVersion: v1
kind: Service
metadata:
  name: {{ name | tojson }}
  labels:
    {{ owner_label }}: {{ name | tojson }}
spec:
  ports:
    - port: {{ app_port }}
      targetPort: {{ app_port }}
      name: {{ url_prefix | tojson }}
  selector:
    app.kubernetes.io/name: {{ name | tojson }}
    app.kubernetes.io/part-of: devbox
    app.kubernetes.io/managed-by: sealos
"""

ROUTE_TEMPLATE = """\
apiVersion: networking.k8s.io/v1
kind: Ingress
metadata:
  name: {{ (name ~ '-' ~ url_prefix) | tojson }}
  labels:
    {{ owner_label }}: {{ name | tojson }}
    {{ domain_label }}: {{ host | tojson }}
  annotations:
    kubernetes.io/ingress.class: nginx
    nginx.ingress.kubernetes.io/proxy-body-size: 32m
    nginx.ingress.kubernetes.io/ssl-redirect: 'false'
    nginx.ingress.kubernetes.io/backend-protocol: HTTP
    nginx.ingress.kubernetes.io/client-body-buffer-size: 64k
    nginx.ingress.kubernetes.io/proxy-buffer-size: 64k
    nginx.ingress.kubernetes.io/proxy-send-timeout: '300'
    nginx.ingress.kubernetes.io/proxy-read-timeout: '300'
    nginx.ingress.kubernetes.io/server-snippet: |
      client_header_buffer_size 64k;
      large_client_header_buffers 4 128k;
spec:
  rules:
    - host: {{ host | tojson }}
      http:
        paths:
          - pathType: Prefix
            path: /
            backend:
              service:
                name: {{ name | tojson }}
                port:
                  number: {{ app_port }}
  tls:
    - hosts:
        - {{ host | tojson }}
      secretName: wildcard-cert
"""

_env = jinja2.Environment(autoescape=False, keep_trailing_newline=True, undefined=jinja2.StrictUndefined)  # noqa: S701


@dataclass(frozen=True)
class RenderedManifests:
    """The three provisioning manifests, in apply order."""

    workspace: str
    service: str
    route: str

    def documents(self) -> list[tuple[ResourceKind, dict]]:
        """Parsed objects paired with their kind: workspace, service, route."""
        return [
            (ResourceKind.WORKSPACE, yaml.safe_load(self.workspace)),
            (ResourceKind.SERVICE, yaml.safe_load(self.service)),
            (ResourceKind.ROUTE, yaml.safe_load(self.route)),
        ]

    def as_stream(self) -> str:
        """Multi-document YAML, suitable for ``kubectl apply -f -``."""
        return "---\n".join(doc.rstrip("\n") + "\n" for doc in (self.workspace, self.service, self.route))


def route_host(url_prefix: str, url_suffix: str) -> str:
    return f"{url_prefix}.{url_suffix}"


def render_manifests(
    *,
    name: str,
    url_prefix: str,
    url_suffix: str,
    template_id: str,
    image: str,
    cpu: str | None = None,
    memory: str | None = None,
) -> RenderedManifests:
    """Render the workspace, service and route manifests for one workspace."""
    template_vars = {
        "name": name,
        "url_prefix": url_prefix,
        "host": route_host(url_prefix, url_suffix),
        "cpu": cpu or DEFAULT_CPU,
        "memory": memory or DEFAULT_MEMORY,
        "template_id": template_id,
        "image": image,
        "app_port": APP_PORT,
        "owner_label": OWNER_LABEL,
        "domain_label": DOMAIN_LABEL,
    }
    return RenderedManifests(
        workspace=_env.from_string(WORKSPACE_TEMPLATE).render(**template_vars),
        service=_env.from_string(SERVICE_TEMPLATE).render(**template_vars),
        route=_env.from_string(ROUTE_TEMPLATE).render(**template_vars),
    )


def build_release_body(workspace: str, tag: str, notes: str, workspace_uid: str | None) -> dict:
    """Release object for ``<workspace>-<tag>``.

    The owner reference is non-controlling and does not block owner deletion;
    it only lets the control plane garbage-collect releases with their
    workspace.
    """
    metadata: dict = {"name": release_key(workspace, tag)}
    if workspace_uid:
        metadata["ownerReferences"] = [
            {
                "apiVersion": "devbox.sealos.io/v1alpha1",
                "kind": ResourceKind.WORKSPACE.value,
                "name": workspace,
                "uid": workspace_uid,
                "blockOwnerDeletion": False,
                "controller": False,
            }
        ]
    return {
        "apiVersion": "devbox.sealos.io/v1alpha1",
        "kind": ResourceKind.RELEASE.value,
        "metadata": metadata,
        "spec": {"devboxName": workspace, "newTag": tag, "notes": notes},
    }
