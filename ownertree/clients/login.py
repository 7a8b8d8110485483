"""
Finding the credentials: in kubeconfig files, or in the pod's service account.

Only the credentials usable as they are stored can be used: tokens,
client certificates, usernames & passwords. The dynamic credentials
of the exec-plugins and auth-providers are neither obtained nor refreshed.
"""
import os
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ownertree.helpers import typedefs
from ownertree.structs import credentials

# https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
SERVICE_ACCOUNT_DIR = '/var/run/secrets/kubernetes.io/serviceaccount'
SERVICE_ACCOUNT_SERVER = 'https://kubernetes.default.svc'
DEFAULT_KUBECONFIG = '~/.kube/config'


def login(
        *,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        logger: typedefs.Logger,
) -> credentials.ConnectionInfo:
    """
    Get the credentials from kubeconfig files, or from the service account.

    The explicitly given kubeconfig must be readable. Otherwise, ``$KUBECONFIG``
    or ``~/.kube/config`` are tried first, and the service account then.
    """
    info = login_with_kubeconfig(path=kubeconfig, context=context)
    if info is not None:
        logger.debug(f"Logged in with kubeconfig to {info.server}.")
        return info

    info = login_with_service_account()
    if info is not None:
        logger.debug(f"Logged in with the service account to {info.server}.")
        return info

    raise credentials.LoginError("Neither kubeconfig nor a service account is found.")


def login_with_service_account() -> Optional[credentials.ConnectionInfo]:
    """ Get the credentials of the pod's service account, if running in a cluster. """
    token = _read_text(os.path.join(SERVICE_ACCOUNT_DIR, 'token'))
    if token is None:
        return None

    ca_path = os.path.join(SERVICE_ACCOUNT_DIR, 'ca.crt')
    return credentials.ConnectionInfo(
        server=SERVICE_ACCOUNT_SERVER,
        ca_path=ca_path if os.path.exists(ca_path) else None,
        token=token or None,
        default_namespace=_read_text(os.path.join(SERVICE_ACCOUNT_DIR, 'namespace')) or None,
    )


def _read_text(path: str) -> Optional[str]:
    if not os.path.exists(path):
        return None
    with open(path, encoding='utf-8') as f:
        return f.read().strip()


def login_with_kubeconfig(
        *,
        path: Optional[str] = None,
        context: Optional[str] = None,
) -> Optional[credentials.ConnectionInfo]:
    """
    Get the credentials of the current (or the given) context of kubeconfigs.

    Several files can be listed in ``$KUBECONFIG``; they are merged so that
    the first file that defines a context, a cluster, or a user, wins.
    Only the static credentials are taken; the plugins are never executed.
    """
    filenames = _find_kubeconfigs(path)
    if not filenames:
        return None

    current_context, sections = _read_kubeconfigs(filenames)
    current_context = context or current_context
    if current_context is None:
        raise credentials.LoginError("Current context is not set in kubeconfigs.")
    if current_context not in sections['contexts']:
        raise credentials.LoginError(f"Context {current_context!r} is not found in kubeconfigs.")

    ctx = sections['contexts'][current_context]
    cluster = sections['clusters'].get(ctx.get('cluster'), {})
    user = sections['users'].get(ctx.get('user'), {})
    if not cluster.get('server'):
        raise credentials.LoginError(f"Context {current_context!r} has no server configured.")

    # The auth-providers are not refreshed; their last access tokens are used while valid.
    provider = user.get('auth-provider') or {}
    provider_token = (provider.get('config') or {}).get('access-token')

    return credentials.ConnectionInfo(
        server=cluster['server'],
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=user.get('token') or provider_token,
        default_namespace=ctx.get('namespace'),
    )


def _find_kubeconfigs(path: Optional[str]) -> List[str]:
    # https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    paths = path or os.environ.get('KUBECONFIG') or ''
    filenames = [os.path.expanduser(name.strip()) for name in paths.split(os.pathsep)]
    filenames = [name for name in filenames if name]
    if not filenames and os.path.exists(os.path.expanduser(DEFAULT_KUBECONFIG)):
        filenames = [os.path.expanduser(DEFAULT_KUBECONFIG)]
    return filenames


def _read_kubeconfigs(
        filenames: List[str],
) -> Tuple[Optional[str], Dict[str, Dict[str, Dict[str, Any]]]]:
    current_context: Optional[str] = None
    sections: Dict[str, Dict[str, Dict[str, Any]]] = {
        'contexts': {},
        'clusters': {},
        'users': {},
    }
    for filename in filenames:
        try:
            with open(filename, encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise credentials.LoginError(f"Cannot read the kubeconfig {filename!r}: {e}") from e
        if not isinstance(config, dict):
            raise credentials.LoginError(f"Cannot read the kubeconfig {filename!r}: not a mapping.")

        current_context = current_context or config.get('current-context')
        for section, items in sections.items():
            field = section[:-1]  # "contexts" -> "context"
            for item in config.get(section) or []:
                items.setdefault(item['name'], item.get(field) or {})
    return current_context, sections
