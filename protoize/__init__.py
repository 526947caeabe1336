import importlib

mod = "protoize"
class LazyLoader:
    """
    Lazy loader for the protoize functions to speed up startup time.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, func_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, func_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the functions and their corresponding module paths
_mappings = {
    "convert_openapi_to_proto": (f"{mod}.openapitoproto", "convert_openapi_to_proto"),
    "load_openapi": (f"{mod}.openapiloader", "load_openapi"),
    "OpenApiToProto": (f"{mod}.openapitoproto", "OpenApiToProto"),
    "ProtoEncoder": (f"{mod}.protoencoder", "ProtoEncoder"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
