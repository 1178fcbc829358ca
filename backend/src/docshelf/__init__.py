"""docshelf - document management backend

Users upload files, the service stores them in an S3-compatible bucket, classifies
them with an AI analysis pass and lets owners share them privately (user-to-user
grants) or publicly (unguessable token + QR code).
"""

__version__ = "0.1.0"
