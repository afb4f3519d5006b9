#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..service import Protocol, ServiceDefinition, index, json_rpc

SERVICE = ServiceDefinition(
    name="Textract",
    signing_name="textract",
    endpoint_prefix="textract",
    protocol=Protocol.AWS_JSON_1_1,
    api_version="2018-06-27",
    target_prefix="Textract",
    operations=index(
        json_rpc(
            "AnalyzeDocument",
            "AnalyzeExpense",
            "AnalyzeID",
            "DetectDocumentText",
            "GetDocumentAnalysis",
            "GetDocumentTextDetection",
            "GetExpenseAnalysis",
            "GetLendingAnalysis",
            "GetLendingAnalysisSummary",
            "StartDocumentAnalysis",
            "StartDocumentTextDetection",
            "StartExpenseAnalysis",
            "StartLendingAnalysis",
        )
    ),
)


class TextractClient(ServiceClient):
    """Client for Amazon Textract.

    Raw document bytes in ``Document.Bytes`` may be passed as :py:class:`bytes`;
    they're base64 encoded on the wire.
    """

    SERVICE = SERVICE
