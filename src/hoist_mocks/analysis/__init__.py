"""
Static Analysis Package.

Visitors and predicates used to decide what may be moved:

Modules:
    - ``bindings``: Local binding and free reference sets of a subtree.
    - ``purity``: Syntactic side-effect freedom of expressions.
"""
