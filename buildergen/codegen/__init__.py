"""Go builder code generation: type rendering, templates and synthesis."""
