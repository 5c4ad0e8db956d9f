"""The bootstrap kernel.

A `Kernel` is created with an environment name, an application root and a
debug flag, and does nothing else until its registry is first needed:

    kernel = Kernel("console", "/var/www/app")
    kernel.run(*sys.argv[1:])

The first access to `Kernel.container` boots the kernel exactly once:

- debug: build a fresh registry from the config cascade and never cache it;
- cached artifact present: adopt the registry stored in the artifact;
- otherwise: build a fresh registry and persist it unless the registry's
  ``container.cache`` parameter is false.

Any public method the kernel does not declare is forwarded to the registry's
``app`` service. The `set_up` hook runs once, before the first forward.
Subclasses customize `init` (end of construction) and `set_up`.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from bootkernel import config
from bootkernel.adapters.compiler.yaml_dumper import YamlCompiler
from bootkernel.adapters.config_loader.yaml_loader import YamlFileLoader
from bootkernel.adapters.registry.memory import ServiceRegistry
from bootkernel.interfaces.compiler import AbstractCompiler
from bootkernel.interfaces.config_loader import AbstractConfigLoader
from bootkernel.interfaces.registry import AbstractRegistry

from .cache import BootState, ContainerCache, cache_filename, is_cacheable
from .cascade import ConfigCascade, base_layer, layers_for
from .errors import ContainerAlreadySetError, ContainerNotFoundError
from .parameters import build_parameters
from .paths import PathLike, PathResolver, derive_name

logger = logging.getLogger(__name__)

RegistryFactory = Callable[[Mapping[str, Any]], AbstractRegistry]
LoaderFactory = Callable[[AbstractRegistry, Path], AbstractConfigLoader]


class Kernel:  # pylint: disable=too-many-instance-attributes, too-many-public-methods
    """Bootstraps an application from its directory layout and config layers."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        environment: str = config.DEFAULT_ENVIRONMENT,
        app_path: PathLike = "",
        debug: bool = False,
        *,
        environ: Mapping[str, str] | None = None,
        registry_factory: RegistryFactory = ServiceRegistry,
        loader_factory: LoaderFactory = YamlFileLoader,
        compiler: AbstractCompiler | None = None,
    ) -> None:
        """Store the kernel's inputs; no file system access happens here.

        Args:
            environment: Selects the config layers, e.g. ``console`` loads
                ``config/console.yml``.
            app_path: Application root. Empty means the directory of the module
                that defines the concrete kernel class.
            debug: When True the registry is rebuilt on every boot and never cached.
            environ: Process environment snapshot exposed as parameters;
                defaults to `os.environ` read at parameter-build time.
            registry_factory: Builds an open registry from seed parameters.
            loader_factory: Builds a config loader for a registry and directory.
            compiler: Reads and writes cache artifacts.
        """
        self._environment = environment
        self._debug = debug
        self._paths = PathResolver(app_path, default_app_path=self._home)
        self._environ = environ
        self._registry_factory = registry_factory
        self._loader_factory = loader_factory
        self._compiler = compiler if compiler is not None else YamlCompiler()

        self._name: str | None = None
        self._version = config.DEFAULT_VERSION
        self._charset = ""
        self._default_sub_environment = config.DEFAULT_SUB_ENVIRONMENT

        self._container: AbstractRegistry | None = None
        self._app_initialized = False
        self.boot_state = BootState.UNBOOTED

        self.init()

    # --- Hooks ---

    def init(self) -> None:
        """Called at the end of construction. Optional."""

    def set_up(self) -> None:
        """Called once, before the first call is forwarded to the app. Optional."""

    # --- Registry ---

    @property
    def container(self) -> AbstractRegistry:
        """The registry, booting the kernel on first access."""
        if self._container is None:
            self.boot()
        if self._container is None:
            raise ContainerNotFoundError
        return self._container

    def set_container(self, container: AbstractRegistry) -> None:
        """Adopt a registry.

        A registry set from outside is used as is; the kernel counts as booted
        and `boot_state` becomes `BootState.ADOPTED`.

        Raises:
            ContainerAlreadySetError: If the kernel already has a registry.
        """
        if self._container is not None:
            raise ContainerAlreadySetError
        self._container = container
        self.boot_state = BootState.ADOPTED

    def has_booted(self) -> bool:
        return self._container is not None

    def boot(self) -> BootState:
        """Build or load the registry once; later calls are no-ops."""
        if self.has_booted():
            return self.boot_state

        if self._debug:
            registry = self._build_container()
            state = BootState.FRESH_DEBUG
        else:
            cache = self.get_container_cache()
            if cache.exists():
                registry = cache.load()
                state = BootState.LOADED_FROM_CACHE
            else:
                registry = self._build_container()
                if is_cacheable(registry):
                    cache.persist(registry)
                    state = BootState.FRESH_CACHED
                else:
                    state = BootState.FRESH_NOCACHE

        self.set_container(registry)
        self.boot_state = state
        logger.info(
            "Kernel %s booted (environment=%s, sub_environment=%s, state=%s)",
            self.name,
            self._environment,
            self.sub_environment,
            state.value,
        )
        return state

    def _build_container(self) -> AbstractRegistry:
        registry = self._registry_factory(self.get_container_parameters())
        config_path = self.config_path
        cascade = ConfigCascade(self._loader_factory(registry, config_path), config_path)
        loaded = cascade.apply(
            self._environment, lambda: self._sub_environment_of(registry)
        )
        registry.compile()
        logger.debug("Container built from layers %s", loaded or "<none>")
        return registry

    def get_config_layers(self) -> list[str]:
        """Layer names the cascade applies, e.g. ``["console.yml", "console.local.yml"]``.

        The override layer follows the same rule as boot: a registry's
        ``app.sub_environment`` wins, and before boot the base layer is read
        into a scratch registry so that a sub-environment it sets is honored.
        Nothing is written and the kernel stays unbooted.
        """
        if self._container is not None:
            return layers_for(self._environment, self.sub_environment)

        scratch = self._registry_factory(self.get_container_parameters())
        config_path = self.config_path
        ConfigCascade(self._loader_factory(scratch, config_path), config_path).load(
            [base_layer(self._environment)]
        )
        return layers_for(self._environment, self._sub_environment_of(scratch))

    # --- Cache ---

    def get_container_cache_filename(self) -> Path:
        """Artifact path, e.g. ``/var/www/storage/cache/container_8a4b....yml``."""
        return cache_filename(self.cache_path, self._environment, self.app_path)

    def get_container_cache(self) -> ContainerCache:
        return ContainerCache(self.get_container_cache_filename(), self._compiler)

    def container_is_cacheable(self) -> bool:
        """True unless the registry defines a false ``container.cache`` parameter."""
        return is_cacheable(self.container)

    # --- Parameters ---

    def get_container_parameters(self) -> Mapping[str, Any]:
        """Parameters seeded into a fresh registry (``app.*`` plus environment)."""
        environ = (
            self._environ if self._environ is not None else config.process_environment()
        )
        return build_parameters(
            name=self.name,
            version=self.version,
            environment=self._environment,
            sub_environment=self.sub_environment,
            debug=self._debug,
            charset=self.charset,
            paths=self._paths.resolve(),
            environ=environ,
        )

    get_app_parameters = get_container_parameters

    # --- Application dispatch ---

    def get_application(self) -> Any:
        """Resolve the ``app`` service, running `set_up` before the first resolve."""
        if not self._app_initialized:
            logger.debug("Setting up kernel %s", type(self).__name__)
            self.set_up()

        application = self.container.get(config.APP_SERVICE_ID)
        self._app_initialized = True
        return application

    def invoke(self, method: str, /, *args: Any, **kwargs: Any) -> Any:
        """Call ``method`` on the ``app`` service and return its result."""
        application = self.get_application()
        try:
            target = getattr(application, method)
        except AttributeError as e:
            raise AttributeError(
                f"{type(application).__name__!r} app service has no method {method!r}"
            ) from e
        logger.debug("Forwarding %s() to %s", method, type(application).__name__)
        return target(*args, **kwargs)

    def run(self, *args: Any, **kwargs: Any) -> Any:
        """Run the ``app`` service."""
        return self.invoke("run", *args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        # only called for names the kernel does not declare; a declared
        # property that raised AttributeError must not become a forward
        if name.startswith("_") or hasattr(type(self), name):
            raise AttributeError(name)
        return functools.partial(self.invoke, name)

    # --- Identity ---

    @property
    def name(self) -> str:
        """Application name, e.g. ``App``; derived from `app_path` when unset."""
        if self._name is None:
            self._name = derive_name(self.app_path)
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def version(self) -> str:
        return self._version

    @version.setter
    def version(self, value: str) -> None:
        self._version = value

    @property
    def environment(self) -> str:
        """Environment name, e.g. ``console`` or ``web``."""
        return self._environment

    @environment.setter
    def environment(self, value: str) -> None:
        self._environment = value

    @property
    def sub_environment(self) -> str:
        """Sub-environment name, e.g. ``local`` or ``production``.

        Selects the override layer. Once a registry exists, its
        ``app.sub_environment`` parameter takes precedence over the default.
        """
        return self._sub_environment_of(self._container)

    @sub_environment.setter
    def sub_environment(self, value: str) -> None:
        self._default_sub_environment = value

    def _sub_environment_of(self, registry: AbstractRegistry | None) -> str:
        if registry is not None and registry.has_parameter(
            config.SUB_ENVIRONMENT_PARAMETER
        ):
            return str(registry.get_parameter(config.SUB_ENVIRONMENT_PARAMETER))
        return self._default_sub_environment

    @property
    def debug(self) -> bool:
        return self._debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self._debug = value

    def is_debug(self) -> bool:
        return self._debug

    @property
    def charset(self) -> str:
        if not self._charset:
            self._charset = config.DEFAULT_CHARSET
        return self._charset

    @charset.setter
    def charset(self, value: str) -> None:
        self._charset = value

    # --- Paths ---

    @property
    def paths(self) -> PathResolver:
        return self._paths

    def _home(self) -> Path:
        return Path(inspect.getfile(type(self))).resolve().parent

    @property
    def app_path(self) -> Path:
        return self._paths.app_path

    @app_path.setter
    def app_path(self, value: PathLike) -> None:
        self._paths.app_path = value

    @property
    def config_path(self) -> Path:
        return self._paths.config_path

    @config_path.setter
    def config_path(self, value: PathLike) -> None:
        self._paths.config_path = value

    @property
    def base_path(self) -> Path:
        return self._paths.base_path

    @base_path.setter
    def base_path(self, value: PathLike) -> None:
        self._paths.base_path = value

    @property
    def storage_path(self) -> Path:
        return self._paths.storage_path

    @storage_path.setter
    def storage_path(self, value: PathLike) -> None:
        self._paths.storage_path = value

    @property
    def log_path(self) -> Path:
        return self._paths.log_path

    @log_path.setter
    def log_path(self, value: PathLike) -> None:
        self._paths.log_path = value

    @property
    def cache_path(self) -> Path:
        return self._paths.cache_path

    @cache_path.setter
    def cache_path(self, value: PathLike) -> None:
        self._paths.cache_path = value

    @property
    def src_path(self) -> Path:
        return self._paths.src_path

    @src_path.setter
    def src_path(self, value: PathLike) -> None:
        self._paths.src_path = value
