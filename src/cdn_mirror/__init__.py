"""Mirror S3 objects to a local directory through a CloudFront distribution."""

__version__ = "0.1.0"
