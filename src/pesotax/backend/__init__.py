"""Backend services for the PesoTax calculation engine."""
