"""
S3 uploads that trigger the object-created Lambda, and their cleanup.
"""
from lambda_harness.errors import TransportError, transport_errors
from lambda_harness.harness_config import AwsClientConfig
from lambda_harness.logging_utils import log_cleanup_failure
from lambda_harness.models import S3UploadObject


class S3Operations:

    def __init__(self, config: AwsClientConfig, client=None):
        self.config = config
        self.client = client if client is not None else config.client('s3')

    def upload_file(self, bucket_name: str, upload_object: S3UploadObject) -> str:
        """
        Upload an object to the bucket under test.

        Args:
            bucket_name: Bucket with the Lambda notification configured
            upload_object: Key and text content to upload

        Returns:
            ETag of the stored object
        """
        with transport_errors('s3.put_object'):
            response = self.client.put_object(
                Bucket=bucket_name,
                Key=upload_object.filename,
                Body=upload_object.filecontent.encode('utf-8'),
                ContentType=upload_object.content_type,
                Metadata=upload_object.metadata
            )
        print(f"Uploaded {upload_object.filename} to {bucket_name}")
        return response.get('ETag', '')

    def delete_object(self, bucket_name: str, key: str) -> bool:
        """
        Delete a test object. Best-effort: failures are logged, not raised.

        Returns:
            True if the delete call succeeded, False otherwise
        """
        try:
            with transport_errors('s3.delete_object'):
                self.client.delete_object(Bucket=bucket_name, Key=key)
        except TransportError as e:
            log_cleanup_failure('delete_object', e)
            return False

        print(f"Test file {key} cleaned up from {bucket_name}")
        return True
