"""
Unified Component Registry for Channels and Mechanisms.

This module provides one registration and factory system for the pluggable
parts of a compartment model: channel kinetics presets and mechanism
classes. Model loaders use it to build components from names found in a
model description.

Architecture:
=============
    ComponentRegistry
        ├── channel:ACurrent → GatingKinetics(...)
        ├── channel:Kd → GatingKinetics(...)
        ├── mechanism:IntegralController → IntegralController
        └── mechanism:CalciumTarget → CalciumTarget

Usage Example:
==============
    # Register a mechanism class
    @ComponentRegistry.register("IntegralController", "mechanism")
    class IntegralController(Mechanism):
        ...

    # Register a kinetics preset
    NAV = register_kinetics(GatingKinetics(name="NaV", ...))

    # Create components dynamically
    kd = ComponentRegistry.create("channel", "Kd", ChannelConfig(gbar=100.0, E=-80.0))
    ctrl = ComponentRegistry.create("mechanism", "IntegralController", IntegralControllerConfig())

    # Discover components
    ComponentRegistry.list_components("channel")
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from homeostat.errors import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ComponentRegistry:
    """Registry for channel kinetics and mechanism classes.

    Registry Structure:
        _registry = {
            "channel": {"ACurrent": GatingKinetics, "Kd": GatingKinetics},
            "mechanism": {"IntegralController": IntegralController},
        }

    Attributes:
        _registry: Nested dict of component_type -> name -> entry
        _aliases: Nested dict of component_type -> alias -> canonical_name
        _metadata: Component metadata (description, module)
    """

    _registry: Dict[str, Dict[str, Any]] = {
        "channel": {},
        "mechanism": {},
    }

    _aliases: Dict[str, Dict[str, str]] = {
        "channel": {},
        "mechanism": {},
    }

    _metadata: Dict[str, Dict[str, Dict[str, Any]]] = {
        "channel": {},
        "mechanism": {},
    }

    @classmethod
    def _add(
        cls,
        component_type: str,
        name: str,
        entry: Any,
        aliases: Optional[List[str]],
        description: str,
    ) -> None:
        if component_type not in cls._registry:
            raise ConfigurationError(
                f"Invalid component_type '{component_type}'. "
                f"Must be one of: {list(cls._registry.keys())}"
            )

        type_registry = cls._registry[component_type]
        if name in type_registry:
            existing = type_registry[name]
            if existing is entry:
                return  # Same entry, already registered
            raise ConfigurationError(
                f"{component_type.capitalize()} name '{name}' already registered"
            )

        type_registry[name] = entry

        if aliases:
            alias_registry = cls._aliases[component_type]
            for alias in aliases:
                if alias in type_registry or alias in alias_registry:
                    raise ConfigurationError(
                        f"Alias '{alias}' already registered for {component_type}"
                    )
                alias_registry[alias] = name

        cls._metadata[component_type][name] = {
            "description": description or getattr(entry, "__doc__", "") or "",
            "module": getattr(entry, "__module__", ""),
        }
        logger.debug("Registered %s '%s'", component_type, name)

    @classmethod
    def register(
        cls,
        name: str,
        component_type: str = "mechanism",
        *,
        aliases: Optional[List[str]] = None,
        description: str = "",
    ) -> Callable[[type], type]:
        """Decorator to register a mechanism class.

        Args:
            name: Primary name for the component
            component_type: Type of component (classes live under "mechanism")
            aliases: Optional list of alternative names
            description: Human-readable description

        Raises:
            ConfigurationError: If component_type invalid or name already taken

        Example:
            @ComponentRegistry.register("CalciumTarget", "mechanism")
            class CalciumTarget(Mechanism):
                '''Calcium set-point provider.'''
        """

        def decorator(component_class: type) -> type:
            if not inspect.isclass(component_class):
                raise ConfigurationError(
                    f"Component must be a class, got {component_class}"
                )
            cls._add(component_type, name, component_class, aliases, description)
            return component_class

        return decorator

    @classmethod
    def get(cls, component_type: str, name: str) -> Optional[Any]:
        """Get a registered entry by type and name (or alias).

        Returns:
            The registered class or kinetics value, None if not found
        """
        if component_type not in cls._registry:
            return None

        alias_registry = cls._aliases[component_type]
        if name in alias_registry:
            name = alias_registry[name]

        return cls._registry[component_type].get(name)

    @classmethod
    def create(
        cls,
        component_type: str,
        name: str,
        config: Any = None,
        **kwargs: Any,
    ) -> Any:
        """Create a component instance.

        Channels become a :class:`Conductance` around the registered kinetics;
        mechanisms are instantiated as ``cls(config, **kwargs)``.

        Raises:
            ValueError: If the component is not registered
        """
        entry = cls.get(component_type, name)

        if entry is None:
            available = cls.list_components(component_type)
            raise ValueError(
                f"{component_type.capitalize()} '{name}' not registered. "
                f"Available {component_type}s: {available}"
            )

        if component_type == "channel":
            from homeostat.components.channels.conductance import Conductance

            return Conductance(entry, config, **kwargs)

        return entry(config, **kwargs)

    @classmethod
    def is_registered(cls, component_type: str, name: str) -> bool:
        """Check if a component is registered under a name or alias."""
        if component_type not in cls._registry:
            return False
        return (
            name in cls._registry[component_type]
            or name in cls._aliases[component_type]
        )

    @classmethod
    def list_components(
        cls,
        component_type: Optional[str] = None,
    ) -> List[str] | Dict[str, List[str]]:
        """List all registered components.

        Args:
            component_type: If specified, list only this type.
                          If None, return dict of all types.

        Example:
            ComponentRegistry.list_components("channel")
            # ['ACurrent', 'KCaAB', 'Kd', 'Kslow']
        """
        if component_type is not None:
            if component_type not in cls._registry:
                return []
            return sorted(cls._registry[component_type].keys())

        return {
            ctype: sorted(registry.keys())
            for ctype, registry in cls._registry.items()
            if registry
        }

    @classmethod
    def get_metadata(cls, component_type: str, name: str) -> Dict[str, Any]:
        """Get metadata recorded at registration time."""
        entry_name = cls._aliases.get(component_type, {}).get(name, name)
        return dict(cls._metadata.get(component_type, {}).get(entry_name, {}))

    @classmethod
    def unregister(cls, component_type: str, name: str) -> None:
        """Remove a component and its aliases. Mainly for tests."""
        if component_type not in cls._registry:
            return
        cls._registry[component_type].pop(name, None)
        cls._metadata[component_type].pop(name, None)
        alias_registry = cls._aliases[component_type]
        for alias in [a for a, target in alias_registry.items() if target == name]:
            del alias_registry[alias]


def register_kinetics(
    kinetics: T,
    *,
    aliases: Optional[List[str]] = None,
    description: str = "",
) -> T:
    """Register a channel kinetics preset under its own name and return it."""
    ComponentRegistry._add("channel", kinetics.name, kinetics, aliases, description)  # type: ignore[attr-defined]
    return kinetics


def register_mechanism(
    name: str,
    *,
    aliases: Optional[List[str]] = None,
    description: str = "",
) -> Callable[[type], type]:
    """Shorthand for ``ComponentRegistry.register(name, "mechanism")``."""
    return ComponentRegistry.register(
        name, "mechanism", aliases=aliases, description=description
    )


__all__ = [
    "ComponentRegistry",
    "register_kinetics",
    "register_mechanism",
]
