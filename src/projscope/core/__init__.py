"""
Project resolution core: type catalog, root resolver, registry and
context scope.
"""
