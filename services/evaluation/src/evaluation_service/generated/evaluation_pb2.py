# -*- coding: utf-8 -*-
# Generated by the protocol buffer compiler.  DO NOT EDIT!
# source: evaluation.proto
"""Generated protocol buffer code."""
from google.protobuf.internal import builder as _builder
from google.protobuf import descriptor as _descriptor
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
# @@protoc_insertion_point(imports)

_sym_db = _symbol_database.Default()




DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(b'\n\x10\x65valuation.proto\x12\x08\x65valpool\"\x1e\n\x0f\x45valuateRequest\x12\x0b\n\x03\x66\x65n\x18\x01 \x01(\t\",\n\x08\x42\x65stMove\x12\x10\n\x08\x62\x65stmove\x18\x01 \x01(\t\x12\x0e\n\x06ponder\x18\x02 \x01(\t\"N\n\x06PvLine\x12\x0c\n\x04rank\x18\x01 \x01(\x05\x12\r\n\x05\x64\x65pth\x18\x02 \x01(\x05\x12\n\n\x02\x63p\x18\x03 \x01(\x05\x12\x0c\n\x04mate\x18\x04 \x01(\x05\x12\r\n\x05moves\x18\x05 \x03(\t\"U\n\x10\x45valuateResponse\x12 \n\x04\x62\x65st\x18\x01 \x01(\x0b\x32\x12.evalpool.BestMove\x12\x1f\n\x05lines\x18\x02 \x03(\x0b\x32\x10.evalpool.PvLine\"\x14\n\x12HealthCheckRequest\"k\n\x13HealthCheckResponse\x12\x0f\n\x07healthy\x18\x01 \x01(\x08\x12\x0f\n\x07version\x18\x02 \x01(\t\x12\x0f\n\x07workers\x18\x03 \x01(\x05\x12\x0e\n\x06queued\x18\x04 \x01(\x05\x12\x11\n\tin_flight\x18\x05 \x01(\x05\x32\xa2\x01\n\x11\x45valuationService\x12\x41\n\x08\x45valuate\x12\x19.evalpool.EvaluateRequest\x1a\x1a.evalpool.EvaluateResponse\x12J\n\x0bHealthCheck\x12\x1c.evalpool.HealthCheckRequest\x1a\x1d.evalpool.HealthCheckResponseb\x06proto3')

_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, globals())
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, 'evaluation_pb2', globals())
if _descriptor._USE_C_DESCRIPTORS == False:

  DESCRIPTOR._options = None
  _EVALUATEREQUEST._serialized_start=30
  _EVALUATEREQUEST._serialized_end=60
  _BESTMOVE._serialized_start=62
  _BESTMOVE._serialized_end=106
  _PVLINE._serialized_start=108
  _PVLINE._serialized_end=186
  _EVALUATERESPONSE._serialized_start=188
  _EVALUATERESPONSE._serialized_end=273
  _HEALTHCHECKREQUEST._serialized_start=275
  _HEALTHCHECKREQUEST._serialized_end=295
  _HEALTHCHECKRESPONSE._serialized_start=297
  _HEALTHCHECKRESPONSE._serialized_end=404
  _EVALUATIONSERVICE._serialized_start=407
  _EVALUATIONSERVICE._serialized_end=569
# @@protoc_insertion_point(module_scope)
