# Overview: Flask blueprints, one module per API resource.
