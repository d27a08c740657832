"""Parameter bindings shared by operation specs.

Generated from the service REST specifications. Do not edit manually.
"""

from cloudrest.operations import Parameter, ParameterLocation

PATH = ParameterLocation.PATH
QUERY = ParameterLocation.QUERY
HEADER = ParameterLocation.HEADER
BODY = ParameterLocation.BODY

# Common

accept = Parameter(name="accept", serialized_name="Accept", location=HEADER, constant="application/json")
accept_xml = Parameter(name="accept", serialized_name="Accept", location=HEADER, constant="application/xml")
content_type = Parameter(
    name="content_type", serialized_name="Content-Type", location=HEADER, constant="application/json"
)
content_type_xml = Parameter(
    name="content_type", serialized_name="Content-Type", location=HEADER, constant="application/xml"
)
next_link = Parameter(
    name="next_link", serialized_name="nextLink", location=PATH, required=True, skip_encoding=True
)

# Resource management

api_version = Parameter(name="api_version", serialized_name="api-version", location=QUERY, required=True)
subscription_id = Parameter(
    name="subscription_id", serialized_name="subscriptionId", location=PATH, required=True
)
resource_group_name = Parameter(
    name="resource_group_name", serialized_name="resourceGroupName", location=PATH, required=True
)
monitor_name = Parameter(name="monitor_name", serialized_name="monitorName", location=PATH, required=True)
monitor_parameter = Parameter(name="monitor_parameter", serialized_name="monitorParameter", location=BODY, required=True)
update_body = Parameter(name="body", serialized_name="body", location=BODY, required=True)

# File service

file_version = Parameter(name="file_version", serialized_name="x-ms-version", location=HEADER, required=True)
restype_service = Parameter(name="restype", serialized_name="restype", location=QUERY, constant="service")
restype_share = Parameter(name="restype", serialized_name="restype", location=QUERY, constant="share")
comp_properties = Parameter(name="comp", serialized_name="comp", location=QUERY, constant="properties")
comp_list = Parameter(name="comp", serialized_name="comp", location=QUERY, constant="list")
share_name = Parameter(name="share_name", serialized_name="shareName", location=PATH, required=True)
prefix = Parameter(name="prefix", serialized_name="prefix", location=QUERY)
marker = Parameter(name="marker", serialized_name="marker", location=QUERY)
max_results = Parameter(name="max_results", serialized_name="maxresults", location=QUERY)
include = Parameter(name="include", serialized_name="include", location=QUERY)
timeout = Parameter(name="timeout", serialized_name="timeout", location=QUERY)
metadata = Parameter(
    name="metadata", serialized_name="x-ms-meta", location=HEADER, header_collection_prefix="x-ms-meta-"
)
quota = Parameter(name="quota", serialized_name="x-ms-share-quota", location=HEADER)
delete_snapshots = Parameter(name="delete_snapshots", serialized_name="x-ms-delete-snapshots", location=HEADER)
storage_service_properties = Parameter(
    name="properties", serialized_name="StorageServiceProperties", location=BODY, required=True
)
