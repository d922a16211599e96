"""
References to the API resources (endpoints) by their names.

The registry is immutable: it is built once from the known catalogue
and can only be extended by creating a new registry (`ResourceRegistry.extended`).
"""
import dataclasses
import string
import urllib.parse
from typing import Iterable, Iterator, Mapping, Optional, Union

ResourceId = Union[int, str]


class UnknownResourceError(LookupError):
    """ Raised when a resource is requested by a name that is not registered. """


def build_endpoint(template: str, *ids: ResourceId) -> str:
    """
    Fill the ``{}`` placeholders of the endpoint template with the ids.

    The string ids are escaped to be safe as single path segments,
    so that e.g. a bucket label cannot address another endpoint.
    """
    slots = [field for _, field, _, _ in string.Formatter().parse(template) if field is not None]
    if len(slots) != len(ids):
        raise ValueError(f"The endpoint {template!r} needs {len(slots)} ids, got {len(ids)}.")
    escaped = [urllib.parse.quote(id, safe='') if isinstance(id, str) else id for id in ids]
    return template.format(*escaped)


@dataclasses.dataclass(frozen=True)
class Resource:
    """
    A reference to a specific kind of the API resources.
    """

    name: str
    """
    The resource's name to look it up in the registry; e.g. ``"instances"``.
    """

    endpoint: str
    """
    The endpoint template relative to the API root; e.g. ``"linode/instances/{}/disks"``.
    Every ``{}`` is a parent's id (for the nested resources).
    """

    paged: bool = True
    """
    Whether the endpoint returns the paginated listings.
    """

    def get_url(self, *ids: ResourceId, id: Optional[ResourceId] = None) -> str:
        """
        Build a URL to the whole collection, or to one item if ``id`` is given.
        """
        url = build_endpoint(self.endpoint, *ids)
        if id is not None:
            url = f"{url}/{build_endpoint('{}', id)}"
        return url


class ResourceRegistry(Mapping[str, Resource]):
    """
    A read-only name-to-resource mapping.
    """

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        super().__init__()
        self._resources = {resource.name: resource for resource in resources}

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {sorted(self._resources)!r}>'

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def __getitem__(self, name: str) -> Resource:
        try:
            return self._resources[name]
        except KeyError:
            raise UnknownResourceError(f"Could not find resource named {name!r}.") from None

    def extended(self, *resources: Resource) -> "ResourceRegistry":
        return ResourceRegistry([*self._resources.values(), *resources])

    def endpoint(self, name: str, *ids: ResourceId) -> str:
        return self[name].get_url(*ids)


DEFAULT_RESOURCES = ResourceRegistry([
    Resource('account', 'account', paged=False),
    Resource('account_settings', 'account/settings', paged=False),
    Resource('databases', 'databases/instances'),
    Resource('domain_records', 'domains/{}/records'),
    Resource('domains', 'domains'),
    Resource('events', 'account/events'),
    Resource('firewalls', 'networking/firewalls'),
    Resource('firewall_devices', 'networking/firewalls/{}/devices'),
    Resource('firewall_rules', 'networking/firewalls/{}/rules', paged=False),
    Resource('images', 'images'),
    Resource('instance_configs', 'linode/instances/{}/configs'),
    Resource('instance_disks', 'linode/instances/{}/disks'),
    Resource('instance_ips', 'linode/instances/{}/ips', paged=False),
    Resource('instance_snapshots', 'linode/instances/{}/backups', paged=False),
    Resource('instance_stats', 'linode/instances/{}/stats', paged=False),
    Resource('instance_volumes', 'linode/instances/{}/volumes'),
    Resource('instances', 'linode/instances'),
    Resource('invoice_items', 'account/invoices/{}/items'),
    Resource('invoices', 'account/invoices'),
    Resource('ip_addresses', 'networking/ips'),
    Resource('ipv6_pools', 'networking/ipv6/pools'),
    Resource('ipv6_ranges', 'networking/ipv6/ranges'),
    Resource('kernels', 'linode/kernels'),
    Resource('lke_cluster_api_endpoints', 'lke/clusters/{}/api-endpoints'),
    Resource('lke_clusters', 'lke/clusters'),
    Resource('lke_node_pools', 'lke/clusters/{}/pools'),
    Resource('lke_versions', 'lke/versions'),
    Resource('longview_clients', 'longview/clients'),
    Resource('longview_subscriptions', 'longview/subscriptions'),
    Resource('network_transfer_prices', 'network-transfer/prices'),
    Resource('nodebalancer_configs', 'nodebalancers/{}/configs'),
    Resource('nodebalancer_nodes', 'nodebalancers/{}/configs/{}/nodes'),
    Resource('nodebalancer_stats', 'nodebalancers/{}/stats', paged=False),
    Resource('nodebalancers', 'nodebalancers'),
    Resource('notifications', 'account/notifications'),
    Resource('oauth_clients', 'account/oauth-clients'),
    Resource('object_storage_bucket_certs', 'object-storage/buckets/{}/{}/ssl', paged=False),
    Resource('object_storage_buckets', 'object-storage/buckets'),
    Resource('object_storage_clusters', 'object-storage/clusters'),
    Resource('object_storage_keys', 'object-storage/keys'),
    Resource('payments', 'account/payments'),
    Resource('profile', 'profile', paged=False),
    Resource('regions', 'regions'),
    Resource('ssh_keys', 'profile/sshkeys'),
    Resource('stackscripts', 'linode/stackscripts'),
    Resource('tags', 'tags'),
    Resource('tickets', 'support/tickets'),
    Resource('tokens', 'profile/tokens'),
    Resource('types', 'linode/types'),
    Resource('user_grants', 'account/users/{}/grants', paged=False),
    Resource('users', 'account/users'),
    Resource('vlans', 'networking/vlans'),
    Resource('volumes', 'volumes'),
])
