#!/usr/bin/env python3
"""
Lambda test harness demo.
Shows the test-data helpers at work without AWS, LocalStack or Docker.
"""

import json
import sys
import time

from lambda_harness.data_factory import DataFactory, EventValidators, MockAwsServices


def section(title):
    print(f"\n{title}")
    print("=" * len(title))


def demo_test_messages():
    """Typed message bodies."""
    section("Demo 1: Creating Test Messages")

    user_event = DataFactory.create_test_message('user_event', {
        'userId': 'demo-user-123',
        'action': 'login',
        'metadata': {'ip': '192.168.1.1'}
    })
    order_event = DataFactory.create_test_message('order_event', {
        'orderId': 'order-456',
        'customerId': 'customer-789',
        'amount': 99.99
    })

    print(f"User Event: {json.dumps(user_event, indent=2)}")
    print(f"\nOrder Event: {json.dumps(order_event, indent=2)}")
    return user_event, order_event


def demo_sqs_records(user_event, order_event):
    section("Demo 2: Creating SQS Records")
    record = DataFactory.create_sqs_record(body=json.dumps(user_event))
    print(f"SQS Record: {json.dumps(record, indent=2)}")

    section("Demo 3: Data Validation")
    print(f"SQS Record is valid: {EventValidators.validate_sqs_message(record)}")

    section("Demo 4: Creating SQS Event")
    event = DataFactory.create_sqs_event(2, body=json.dumps(order_event))
    print(f"SQS Event with {len(event['Records'])} records:")
    for index, item in enumerate(event['Records'], 1):
        print(f"  Record {index}: {item['messageId']}")


def demo_lambda_context():
    section("Demo 5: Mock Lambda Context")
    context = MockAwsServices.create_lambda_context(function_name='demo-function')
    print("Lambda Context:")
    print(f"  Function Name: {context.function_name}")
    print(f"  Request ID: {context.aws_request_id}")
    print(f"  Remaining Time: {context.get_remaining_time_in_millis()}ms")


def demo_processing_time():
    """Time a simulated 100ms handler against a 1000ms SLA."""
    section("Demo 6: Performance Simulation")
    start = int(time.time() * 1000)
    time.sleep(0.1)
    end = int(time.time() * 1000)
    print(f"Processing took {end - start}ms")
    print(f"Within 1000ms SLA: {EventValidators.validate_processing_time(start, end, 1000)}")


def demo_invalid_messages():
    section("Demo 7: Error Testing")
    print("Invalid message examples:")
    for index, error_type in enumerate(['malformed_json', 'missing_required_fields', 'invalid_type'], 1):
        message = DataFactory.create_invalid_message(error_type)
        print(f"  {index}. {message[:50]}...")


def main():
    print("Lambda Test Harness Demo")

    user_event, order_event = demo_test_messages()
    demo_sqs_records(user_event, order_event)
    demo_lambda_context()
    demo_processing_time()
    demo_invalid_messages()

    print("\nDemo Complete!")
    print("\nNext steps:")
    print("1. Run the harness tests: pytest tests/unit tests/integration tests/e2e")
    print("2. Point AWS_ENDPOINT_URL at LocalStack and run: LAMBDA_HARNESS_LIVE=1 pytest tests/live")
    print("3. Write your own tests with the lambda_harness.pytest_plugin fixtures")
    return 0


if __name__ == '__main__':
    sys.exit(main())
