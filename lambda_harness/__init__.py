"""
Test harness for AWS Lambda functions triggered by SQS, SNS, S3 and direct
invocation.
"""
__version__ = '0.1.0'
