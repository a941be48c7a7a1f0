"""Test fixtures for endpointgen tests.

This module provides sample TypeScript declaration modules, type declarations
and handler modules, plus a helper that lays them out as a project on disk.
"""

import json
from pathlib import Path

# Compute-backed endpoints only
COMPUTE_ENDPOINTS = '''import { join } from "path";
import {
  ApiClientDefinition,
  ApiEndpoint,
} from "@martzmakes/constructs/lambda/interfaces/ApiClientDefinition";
import { Topping } from "../interfaces/Topping";
import { CreateToppingRequest } from "../interfaces/CreateToppingRequest";

export const endpoints: ApiClientDefinition<{
  getToppingByName: ApiEndpoint<"GET", never, Topping>;
  createTopping: ApiEndpoint<"POST", CreateToppingRequest, Topping>;
  deleteTopping: ApiEndpoint<"DELETE", never, never>;
}> = {
  getToppingByName: {
    path: "toppings/{name}",
    method: "GET",
    description: "Fetch a single topping",
    entry: join(__dirname, "../lambda/getToppingByName.ts"),
    lambdaGenerator: (resources) => ({ environment: {} }),
  },
  createTopping: {
    path: "toppings",
    method: "POST",
    entry: join(__dirname, "../lambda/createTopping.ts"),
    queue: true,
  },
  deleteTopping: {
    path: "toppings/{name}",
    method: "DELETE",
    entry: join(__dirname, "../lambda/deleteTopping.ts"),
  },
};
'''

# Store-backed endpoints: a direct key lookup and an index query
STORE_ENDPOINTS = '''import { Topping } from "../interfaces/Topping";

export const endpoints: ApiClientDefinition<{
  getTopping: ApiEndpoint<"GET", never, Topping>;
  listToppings: ApiEndpoint<"GET", never, Topping>;
}> = {
  getTopping: {
    path: "toppings/{name}",
    method: "GET",
    dynamoGenerator: () => ({
      tableName: "toppings-table",
      action: "GetItem",
      pk: "TOPPING#$input.params('name')",
      sk: "DETAILS",
    }),
  },
  listToppings: {
    path: "toppings",
    method: "GET",
    dynamoGenerator: () => ({
      tableName: "toppings-table",
      action: "Query",
      pk: "TOPPINGS",
      indexName: "gsi1",
    }),
    defaultLimit: 10,
  },
};
'''

# A GetItem endpoint declared with an index
GET_ITEM_WITH_INDEX = '''export const endpoints: ApiClientDefinition<{
  getTopping: ApiEndpoint<"GET", never, Topping>;
}> = {
  getTopping: {
    path: "toppings/{name}",
    method: "GET",
    dynamoGenerator: () => ({
      tableName: "toppings-table",
      action: "GetItem",
      pk: "TOPPING#$input.params('name')",
      indexName: "gsi1",
    }),
  },
};
'''

# Type arguments spread over several lines
MULTILINE_GENERICS = '''export const endpoints: ApiClientDefinition<{
  searchToppings: ApiEndpoint<
    "POST",
    SearchRequest,
    SearchResult
  >;
}> = {
  searchToppings: {
    path: "toppings/search",
    method: "POST",
    entry: join(__dirname, "../lambda/searchToppings.ts"),
  },
};
'''

# The initializer is not an object literal, so only the textual pass finds the endpoints
TEXTUAL_ONLY = '''const routes: ApiClientDefinition<{
  getToppings: ApiEndpoint<"GET", never, ToppingList>;
  addTopping: ApiEndpoint<"PUT", Topping, Topping>;
}> = buildRoutes({
  getToppings: { path: "toppings", method: "GET" },
  addTopping: { path: "toppings/add" },
});
'''

NO_ENDPOINTS = '''export const handler = async () => {
  return {};
};
'''

TOPPING_INTERFACE = '''/**
 * A pizza topping.
 */
export interface Topping {
  pk: string;
  sk: string;
  name: string;
  price: number;
  vegan?: boolean;
  tags: string[];
  nutrition: { calories: number };
  gsi1pk: string;
}
'''

CREATE_TOPPING_INTERFACE = '''export interface CreateToppingRequest {
  name: string;
  price: number;
}
'''

# Declares its type under a file name the direct lookup does not try
SEARCH_TYPES = '''export type SearchRequest = {
  text: string;
  limit?: number;
};

export interface SearchResult {
  items: Array<{ name: string }>;
  nextToken?: string | null;
}
'''

HANDLER_MODULE = '''import { ApiHandler } from "@martzmakes/constructs/lambda/handlers/initApiHandler";
import { Topping } from "../interfaces/Topping";

export const apiHandler: ApiHandler<any, Topping> = async ({ pathParameters }) => {
  return { name: pathParameters.name } as Topping;
};
'''

ROOT_MANIFEST = {
    'name': '@toppings/api',
    'version': '2.0.0',
    'dependencies': {
        '@martzmakes/constructs': '^1.2.0',
        'typescript': '^5.4.0',
    },
}


def write_project(root: Path, endpoints: str = COMPUTE_ENDPOINTS) -> Path:
    """Lay out a small project under ``root`` and return the declaration path.

    ::

        package.json
        lib/routes/internal.ts
        lib/interfaces/Topping.ts
        lib/interfaces/CreateToppingRequest.ts
        lib/lambda/getToppingByName.ts
    """
    routes = root / 'lib' / 'routes'
    interfaces = root / 'lib' / 'interfaces'
    lambdas = root / 'lib' / 'lambda'
    for directory in (routes, interfaces, lambdas):
        directory.mkdir(parents=True, exist_ok=True)

    (root / 'package.json').write_text(json.dumps(ROOT_MANIFEST))
    (interfaces / 'Topping.ts').write_text(TOPPING_INTERFACE)
    (interfaces / 'CreateToppingRequest.ts').write_text(CREATE_TOPPING_INTERFACE)
    (lambdas / 'getToppingByName.ts').write_text(HANDLER_MODULE)

    declaration = routes / 'internal.ts'
    declaration.write_text(endpoints)
    return declaration
