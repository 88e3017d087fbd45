"""Framework library: manifest, installation into .kiro/steering/, reference docs, glossary."""
