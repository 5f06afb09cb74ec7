"""Service registration for wiring the AWS adapters into data protection.

A DataProtectionBuilder collects service registrations. The S3 repository and
KMS encryptor are registered against the XmlRepository and XmlEncryptor
capability types, replacing any previous registration for those types.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

import boto3

from dataprotection_aws.config import DataProtectionOptions, KmsXmlEncryptorConfig, S3XmlRepositoryConfig
from dataprotection_aws.constants import Constants
from dataprotection_aws.exceptions import ServiceResolutionError, ValidationError
from dataprotection_aws.interfaces import XmlEncryptor, XmlRepository
from dataprotection_aws.kms_xml_encryptor import KmsXmlEncryptor
from dataprotection_aws.s3_xml_repository import S3XmlRepository
from dataprotection_aws.validation_utils import require_not_none, validate_not_blank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceDescriptor:
    """A singleton service registration.

    Attributes:
        service_type: Key the service is resolved by, a class or a name
        factory: Callable receiving the ServiceProvider and returning the instance
    """

    service_type: Hashable
    factory: Callable[["ServiceProvider"], Any]

    @classmethod
    def singleton(cls, service_type: Hashable, factory: Callable[["ServiceProvider"], Any]) -> "ServiceDescriptor":
        """Create a descriptor from a factory."""
        require_not_none(service_type, "Service type")
        require_not_none(factory, "Service factory")
        return cls(service_type, factory)

    @classmethod
    def instance(cls, service_type: Hashable, instance: Any) -> "ServiceDescriptor":
        """Create a descriptor for an existing instance."""
        require_not_none(service_type, "Service type")
        require_not_none(instance, "Service instance")
        return cls(service_type, lambda services: instance)


class ServiceCollection:
    """Ordered collection of service registrations."""

    def __init__(self) -> None:
        self._descriptors: list[ServiceDescriptor] = []

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self):
        return iter(list(self._descriptors))

    def add(self, descriptor: ServiceDescriptor) -> "ServiceCollection":
        """Append a registration."""
        require_not_none(descriptor, "Service descriptor")
        self._descriptors.append(descriptor)
        return self

    def add_singleton(self, service_type: Hashable, instance: Any) -> "ServiceCollection":
        """Register an existing instance under a service type."""
        return self.add(ServiceDescriptor.instance(service_type, instance))

    def remove_all(self, service_type: Hashable) -> int:
        """Remove every registration for a service type.

        Returns:
            Number of registrations removed
        """
        before = len(self._descriptors)
        self._descriptors = [d for d in self._descriptors if d.service_type != service_type]
        return before - len(self._descriptors)

    def use(self, descriptor: ServiceDescriptor) -> "ServiceCollection":
        """Make a registration the only one for its service type."""
        require_not_none(descriptor, "Service descriptor")
        removed = self.remove_all(descriptor.service_type)
        if removed:
            logger.debug(f"Replaced {removed} registration(s) for {descriptor.service_type!r}")
        return self.add(descriptor)

    def contains(self, service_type: Hashable) -> bool:
        """Check whether a service type has any registration."""
        return any(d.service_type == service_type for d in self._descriptors)

    def build_service_provider(self) -> "ServiceProvider":
        """Create a provider over a snapshot of the current registrations."""
        return ServiceProvider(list(self._descriptors))


class ServiceProvider:
    """Resolves registered services, creating each singleton once."""

    def __init__(self, descriptors: list[ServiceDescriptor]) -> None:
        self._descriptors: dict[Hashable, ServiceDescriptor] = {}
        # Last registration wins
        for descriptor in descriptors:
            self._descriptors[descriptor.service_type] = descriptor
        self._instances: dict[Hashable, Any] = {}

    def get_service(self, service_type: Hashable) -> Optional[Any]:
        """Resolve a service, returning None when it is not registered."""
        if service_type in self._instances:
            return self._instances[service_type]

        descriptor = self._descriptors.get(service_type)
        if descriptor is None:
            return None

        instance = descriptor.factory(self)
        self._instances[service_type] = instance
        return instance

    def get_required_service(self, service_type: Hashable) -> Any:
        """Resolve a service that must be registered.

        Raises:
            ServiceResolutionError: If the service is not registered
        """
        instance = self.get_service(service_type)
        if instance is None:
            raise ServiceResolutionError(f"No service registered for {service_type!r}")
        return instance

    def activate(self, service_class: type) -> Any:
        """Create an instance of a class that knows how to build itself from services.

        Used to instantiate the decryptor type named by an EncryptedXmlInfo.

        Raises:
            ValidationError: If service_class has no from_services factory
        """
        require_not_none(service_class, "Service class")
        factory = getattr(service_class, "from_services", None)
        if factory is None:
            raise ValidationError(f"{service_class.__name__} cannot be activated from services")
        return factory(self)


class DataProtectionBuilder:
    """Configures where keys are persisted and how they are protected."""

    def __init__(
        self,
        services: Optional[ServiceCollection] = None,
        options: Optional[DataProtectionOptions] = None
    ) -> None:
        self._services = services if services is not None else ServiceCollection()
        self._options = options if options is not None else DataProtectionOptions()
        self._services.use(ServiceDescriptor.instance(DataProtectionOptions, self._options))

    @property
    def services(self) -> ServiceCollection:
        """Get the service collection."""
        return self._services

    @property
    def options(self) -> DataProtectionOptions:
        """Get the data protection options."""
        return self._options

    def set_application_name(self, application_name: str) -> "DataProtectionBuilder":
        """Set the discriminator isolating this application's keys.

        Raises:
            ValidationError: If application_name is blank
        """
        validate_not_blank(application_name, "Application name")
        self._options.application_discriminator = application_name
        return self

    def add_aws_client(self, service_name: str, **client_kwargs: Any) -> "DataProtectionBuilder":
        """Register a lazily created boto3 client under its service name.

        Args:
            service_name: AWS service name, e.g. ``s3`` or ``kms``
            **client_kwargs: Passed through to ``boto3.client``

        Raises:
            ValidationError: If service_name is blank
        """
        validate_not_blank(service_name, "AWS service name")
        self._services.use(ServiceDescriptor.singleton(
            service_name,
            lambda services: boto3.client(service_name, **client_kwargs),
        ))
        return self

    def persist_keys_to_aws_s3(
        self,
        config: S3XmlRepositoryConfig,
        s3_client: Optional[Any] = None
    ) -> "DataProtectionBuilder":
        """Persist the key ring to an S3 bucket.

        Args:
            config: Configuration specifying how to write to S3
            s3_client: S3 client; when omitted the registered ``s3`` client is used

        Returns:
            This builder

        Raises:
            ValidationError: If config is None
        """
        require_not_none(config, "S3 repository config")

        if s3_client is not None:
            self._services.use(ServiceDescriptor.instance(Constants.S3_CLIENT_SERVICE(), s3_client))

        self._services.use(ServiceDescriptor.singleton(
            XmlRepository,
            lambda services: S3XmlRepository(
                services.get_required_service(Constants.S3_CLIENT_SERVICE()),
                config,
            ),
        ))
        logger.debug(f"Configured key persistence to S3 bucket {config.bucket}")
        return self

    def protect_keys_with_aws_kms(
        self,
        config: KmsXmlEncryptorConfig,
        kms_client: Optional[Any] = None
    ) -> "DataProtectionBuilder":
        """Encrypt keys at rest with a KMS key.

        Args:
            config: Configuration specifying which KMS key and context to use
            kms_client: KMS client; when omitted the registered ``kms`` client is used

        Returns:
            This builder

        Raises:
            ValidationError: If config is None
        """
        require_not_none(config, "KMS encryptor config")

        if kms_client is not None:
            self._services.use(ServiceDescriptor.instance(Constants.KMS_CLIENT_SERVICE(), kms_client))

        # The decryptor resolves the same config when activated
        self._services.use(ServiceDescriptor.instance(KmsXmlEncryptorConfig, config))
        self._services.use(ServiceDescriptor.singleton(
            XmlEncryptor,
            lambda services: KmsXmlEncryptor(
                services.get_required_service(Constants.KMS_CLIENT_SERVICE()),
                services.get_required_service(KmsXmlEncryptorConfig),
                services,
            ),
        ))
        logger.debug(f"Configured key encryption with KMS key {config.key_id}")
        return self

    def build_service_provider(self) -> ServiceProvider:
        """Create a provider over the configured services."""
        return self._services.build_service_provider()
