"""Lexical scopes. An Environment maps names to values and links to the enclosing scope. Closures simply keep a
reference to the Environment they were defined in, which keeps it (and its parents) alive.
"""


class Environment:

    def __init__(self, parent=None, bindings=None, name="<scope>"):
        self.parent = parent
        self.bindings = {} if bindings is None else bindings
        self.name = name

    def child(self, name="<scope>"):
        return Environment(self, name=name)

    def declare(self, name, value):
        """Binds name in this very scope (`var`)."""
        self.bindings[name] = value

    def lookup(self, name):
        """Returns the value bound to name in the nearest scope that declares it, or None."""
        env = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.parent
        return None

    def source(self, name):
        """Returns the nearest scope that declares name. If none does, returns the outermost scope."""
        env = self
        while name not in env.bindings and env.parent is not None:
            env = env.parent
        return env

    def assign(self, name, value):
        """Writes value through to the scope that declares name (see source)."""
        self.source(name).declare(name, value)

    @property
    def is_root(self):
        return self.parent is None

    def __contains__(self, name):
        return self.lookup(name) is not None

    def __repr__(self):
        return f"Environment({self.name}, {sorted(self.bindings)})"
