"""GML parsing: grammar, Lark adapter, tree builder, AST and output shaping."""
