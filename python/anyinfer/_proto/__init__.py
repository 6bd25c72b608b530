"""
Generated KServe v2 protocol modules.

The message and service classes are built from grpc_predict_v2.proto at
import time, so no protoc step is needed before running the client. The
proto path is resolved against sys.path, which holds the directory that
contains the anyinfer package.
"""

import grpc

grpc_predict_v2_pb2, grpc_predict_v2_pb2_grpc = grpc.protos_and_services(
    "anyinfer/_proto/grpc_predict_v2.proto"
)

__all__ = ["grpc_predict_v2_pb2", "grpc_predict_v2_pb2_grpc"]
