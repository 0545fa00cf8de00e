"""Language basics: references, functions, control flow, scope, constants and operators."""
