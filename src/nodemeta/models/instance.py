# src/nodemeta/models/instance.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Tag(BaseModel):
    """
    A key/value tag attached to an EC2 instance.

    Built from the boto3 shape ``{"Key": ..., "Value": ...}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(..., alias="Key")
    value: str = Field(..., alias="Value")


class InstanceIdentityDocument(BaseModel):
    """
    Pydantic model for the instance identity document served by the
    instance metadata service at ``dynamic/instance-identity/document``.

    Attributes:
        account_id: AWS account ID owning the instance
        region: AWS region the instance runs in
        instance_id: EC2 instance ID
        availability_zone: Availability zone
        instance_type: Instance type (e.g., 'm5.large')
        image_id: AMI ID
        architecture: CPU architecture (x86_64, arm64)
        private_ip: Primary private IPv4 address
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    account_id: str = Field(..., alias="accountId")
    region: str = Field(..., alias="region")
    instance_id: Optional[str] = Field(None, alias="instanceId")
    availability_zone: Optional[str] = Field(None, alias="availabilityZone")
    instance_type: Optional[str] = Field(None, alias="instanceType")
    image_id: Optional[str] = Field(None, alias="imageId")
    architecture: Optional[str] = Field(None, alias="architecture")
    private_ip: Optional[str] = Field(None, alias="privateIp")
