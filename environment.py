"""
Rinha runtime environments
Flat snapshots: every extension copies the bindings, nothing is shared mutably
"""

from typing import Dict, Iterable, Optional

from error_handling import UnboundVariable


def make_runtime_env(bindings: Optional[Dict] = None) -> Dict:
  """Create an environment holding a private copy of the given bindings"""
  return {
      'bindings': dict(bindings or {})
  }


def env_bind_value(env: Dict, name: str, value: Dict) -> Dict:
  """Return new environment with name bound to value"""
  return {
      **env,
      'bindings': {**env['bindings'], name: value}
  }


def env_bind_values(env: Dict, names: Iterable[str], values: Iterable[Dict]) -> Dict:
  """Return new environment with each name bound to its value, in order"""
  bindings = dict(env['bindings'])
  for name, value in zip(names, values):
    bindings[name] = value
  return {
      **env,
      'bindings': bindings
  }


def env_lookup_value(env: Dict, name: str) -> Dict:
  """Look up a value, failing when the name is unbound"""
  try:
    return env['bindings'][name]
  except KeyError:
    raise UnboundVariable(name) from None
