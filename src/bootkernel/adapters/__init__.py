"""Concrete implementations of the kernel's collaborators.

- `registry.memory.ServiceRegistry`: the default registry.
- `config_loader.yaml_loader.YamlFileLoader`: YAML config layers via PyYAML.
- `compiler.yaml_dumper.YamlCompiler`: YAML serialization of compiled registries.
"""
