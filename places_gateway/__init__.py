"""Places Gateway.

Serverless API gateway that unifies Google Places and Yelp Fusion place data.

Packages:
- normalizer: pure field converters and opening-hours normalization
- providers: upstream provider adapters (one request per call)
- api: request validation, routing, response envelope and token issuance
"""

__version__ = "1.0.0"
