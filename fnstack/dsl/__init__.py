"""Domain-specific language (DSL) for declaring function stacks in YAML.

Load and validate a document with `fnstack.dsl.loader.load_stack_yaml`, then
turn it into declarations, a permission catalog and grant bundles with
`fnstack.dsl.parser.parse_stack`.
"""
